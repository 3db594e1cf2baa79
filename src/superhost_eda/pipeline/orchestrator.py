# ========================
# src/superhost_eda/pipeline/orchestrator.py
# ========================

"""
Pipeline Orchestrator Module

Runs the listings pipeline end to end:
load -> project -> normalize price -> missingness & cohort filter -> persist,
then the descriptive tables, figures and the superhost model.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

import pandas as pd

from .cleaning import ListingFilter, PriceNormalizer
from .errors import PipelineError
from .ingestion import ListingsLoader
from .projection import ColumnProjector
from .schema import HOST_ID, PRICE
from .storage import ListingsSaver
from .transformation import ListingsSummarizer
from ..utils.config import Config
from ..utils.performance_monitor import PerformanceMonitor, monitor_performance

logger = logging.getLogger(__name__)


class ListingsPipeline:
    """
    Orchestrates the listings pipeline.
    Each stage consumes the previous stage's table and returns a new one.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize the pipeline.

        Args:
            config (Config): Configuration object
        """
        self.config = config or Config()
        self.output_dir = str(self.config.OUTPUT_DIR)

        self.loader = ListingsLoader(
            chunk_size=int(self.config.CHUNK_SIZE),
            type_guess_rows=int(self.config.TYPE_GUESS_ROWS),
        )
        self.projector = ColumnProjector()
        self.normalizer = PriceNormalizer(price_ceiling=int(self.config.PRICE_CEILING))
        self.listing_filter = ListingFilter()
        self.summarizer = ListingsSummarizer()
        self.saver = ListingsSaver(self.output_dir)

        # Stage name -> output table, kept for diagnostics
        self.tables: Dict[str, pd.DataFrame] = {}
        self.model_stats: Optional[Dict[str, Any]] = None

        logger.info("ListingsPipeline initialized:")
        logger.info(f"  Source: {self.config.SOURCE_URL}")
        logger.info(f"  Output: {self.output_dir}")
        logger.info(f"  Price ceiling: {self.config.PRICE_CEILING}")

    def run(self, source: Optional[str] = None) -> Dict[str, Any]:
        """
        Execute the complete pipeline from start to finish.

        Args:
            source (str): Overrides the configured source URL or path

        Returns:
            dict: Summary of processing results and saved files
        """
        source = source or self.config.SOURCE_URL
        logger.info(f"Starting listings pipeline for '{source}'...")
        saved_files: Dict[str, str] = {}

        # A pipeline object can be run again; drop the previous run's state
        self.tables = {}
        self.model_stats = None
        self.listing_filter.reset()

        with monitor_performance("ListingsPipeline") as monitor:
            started = time.time()
            try:
                raw = self.loader.load(source)
            except PipelineError as e:
                e.stage = e.stage or 'load'
                raise
            self.tables['load'] = raw
            monitor.record_stage('load', None, len(raw), started_at=started)

            if self.config.SAVE_RAW_COPY:
                saved_files['raw_copy'] = self.saver.save_raw_copy(
                    self.loader.raw_bytes, self.config.RAW_COPY_FILENAME
                )

            projected = self._run_stage(monitor, 'project', self.projector.apply, raw)
            if len(projected.columns) != len(self.projector.columns):
                raise PipelineError("Projection produced an unexpected column count",
                                    stage='project', row_count=len(projected))
            saved_files['select_variables'] = self._persist(projected, self.config.artifact_name('select_variables'))

            table = self._run_stage(monitor, 'normalize_price', self.normalizer.apply, projected)
            for name, stage in self.listing_filter.stages():
                table = self._run_stage(monitor, name, stage, table)

            self._check_host_uniqueness(table)
            analysis_filename = self.config.artifact_name('analysis_dataset')
            saved_files['analysis_dataset'] = self._persist(table.reset_index(drop=True), analysis_filename)

            saved_files.update(self._report(projected, table))
            saved_files['data_dictionary'] = self.saver.create_data_dictionary(
                analysis_filename, self.config.artifact_name('select_variables')
            )

            stage_counts = [
                {key: stage[key] for key in ('stage', 'rows_in', 'rows_out', 'rows_dropped')}
                for stage in monitor.stages
            ]

        results = {
            'pipeline_status': 'completed',
            'source': source,
            'output_directory': self.output_dir,
            'snapshot_date': self.config.SNAPSHOT_DATE,
            'city_label': self.config.CITY_LABEL,
            'stage_counts': stage_counts,
            'price_stats': self.normalizer.stats,
            'price_summary': self.summarizer.price_summary(table[PRICE]),
            'filter_stats': self.listing_filter.get_statistics(),
            'column_types': dict(self.loader.column_types),
            'model': self.model_stats,
        }
        saved_files['summary'] = self.saver.save_summary({**results, 'saved_files': saved_files})
        results['saved_files'] = saved_files

        logger.info("Pipeline finished successfully.")
        self._log_final_summary(results)
        return results

    def _run_stage(self, monitor: PerformanceMonitor, name: str,
                   stage: Callable[[pd.DataFrame], pd.DataFrame],
                   table: pd.DataFrame) -> pd.DataFrame:
        """Run one stage, tag failures with stage context, enforce narrowing."""
        started = time.time()
        rows_in = len(table)
        try:
            result = stage(table)
        except PipelineError as e:
            e.stage = e.stage or name
            if e.row_count is None:
                e.row_count = rows_in
            logger.error(f"Stage '{name}' failed: {e}")
            raise

        if len(result) > rows_in:
            raise PipelineError(f"Stage produced more rows than it received ({len(result)} > {rows_in})",
                                stage=name, row_count=rows_in)

        self.tables[name] = result
        monitor.record_stage(name, rows_in, len(result), started_at=started)
        return result

    def _persist(self, table: pd.DataFrame, filename: str) -> str:
        try:
            return self.saver.save_table(table, filename)
        except PipelineError as e:
            e.row_count = len(table)
            raise

    def _check_host_uniqueness(self, table: pd.DataFrame) -> None:
        if table[HOST_ID].duplicated().any():
            raise PipelineError("host_id is not unique after the cohort filter",
                                stage='restrict_to_single_listing_hosts', row_count=len(table))

    def _report(self, projected: pd.DataFrame, analysis: pd.DataFrame) -> Dict[str, str]:
        """Summary tables, figures and the superhost model."""
        saved_files = {}
        tables = self.summarizer.summarize(projected, analysis)
        saved_files.update(self.saver.save_summary_tables(tables))

        if self.config.MAKE_PLOTS:
            from ..analysis.plots import save_figures
            figures = save_figures(
                analysis, tables,
                str(self.config.get_data_paths()['figures_dir']),
                int(self.config.PRICE_CEILING),
            )
            saved_files.update({f"figure_{name}": path for name, path in figures.items()})

        if self.config.FIT_MODEL and analysis.empty:
            logger.warning("Analysis dataset is empty; skipping the superhost model")
        elif self.config.FIT_MODEL:
            from ..analysis.model import fit_superhost_model
            model = fit_superhost_model(analysis)
            saved_files['model_summary'] = self.saver.save_text(model.summary_text, 'superhost_model.txt')
            saved_files['model_coefficients'] = self.saver.save_summary_tables(
                {'superhost_model_coefficients': model.coefficients}
            )['superhost_model_coefficients']
            self.model_stats = {
                'formula': model.formula,
                'n_observations': model.n_observations,
                'pseudo_r_squared': model.pseudo_r_squared,
                'log_likelihood': model.log_likelihood,
            }
        return saved_files

    def _log_final_summary(self, results: Dict[str, Any]) -> None:
        """Log final pipeline summary."""
        logger.info("=" * 60)
        logger.info("PIPELINE EXECUTION SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Source: {results['source']}")
        for stage in results['stage_counts']:
            logger.info(f"  {stage['stage']}: {stage['rows_out']:,} rows")
        logger.info(f"Output files generated: {len(results['saved_files'])}")
        logger.info(f"Output directory: {results['output_directory']}")
        logger.info("=" * 60)
