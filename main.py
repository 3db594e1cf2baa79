#!/usr/bin/env python3
# ========================
# main.py
# ========================

"""
Main Entry Point for the Superhost EDA Pipeline

Runs the listings pipeline on the configured snapshot (or on a generated
sample snapshot when PIPELINE_GENERATE_SAMPLE=true) and prints a summary.
"""

import sys
import logging
from pathlib import Path

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from superhost_eda.pipeline import ListingsPipeline
from superhost_eda.utils import Config, setup_logging, ListingsGenerator


def main():
    """Main execution function."""
    config = Config()

    setup_logging(
        log_level=config.LOG_LEVEL,
        log_file="pipeline.log",
        log_dir="logs"
    )

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("SUPERHOST EDA PIPELINE - MAIN EXECUTION")
    logger.info("=" * 60)

    invalid = [name for name, ok in config.validate_config().items() if not ok]
    if invalid:
        logger.error(f"Invalid configuration values: {invalid}")
        return 1

    try:
        config.ensure_directories()

        source = config.SOURCE_URL
        if config.GENERATE_SAMPLE:
            logger.info("Step 1: Generating sample snapshot...")
            source = str(Path(config.RAW_DATA_DIR) / "sample_listings.csv.gz")
            generation_stats = ListingsGenerator(seed=42).generate_dataset(
                file_path=source,
                num_rows=int(config.SAMPLE_ROWS),
            )
            logger.info(f"Sample data generated: {generation_stats}")

        logger.info("Step 2: Running listings pipeline...")
        pipeline = ListingsPipeline(config=config)
        results = pipeline.run(source)

        logger.info("Step 3: Pipeline execution summary")
        _print_execution_summary(results)

        logger.info("Pipeline execution completed successfully!")
        return 0

    except Exception as e:
        logger.error(f"Pipeline execution failed: {e}", exc_info=True)
        return 1


def _print_execution_summary(results: dict) -> None:
    """Print final execution summary."""
    print("\n" + "=" * 70)
    print("PIPELINE EXECUTION SUMMARY")
    print("=" * 70)

    print("📥 Rows per stage:")
    for stage in results['stage_counts']:
        print(f"   • {stage['stage']}: {stage['rows_out']:,} (dropped {stage['rows_dropped']:,})")

    price_stats = results['price_stats']
    print("\n💲 Price normalization:")
    print(f"   • Unparseable prices dropped: {price_stats['unparseable_prices']:,}")
    print(f"   • Prices >= {price_stats['price_ceiling']} trimmed: {price_stats['outliers_trimmed']:,}")
    print(f"   • Observed range before trimming: "
          f"{price_stats['min_price_before_trim']} - {price_stats['max_price_before_trim']}")

    model = results.get('model')
    if model:
        print("\n📈 Superhost model:")
        print(f"   • {model['formula']}")
        print(f"   • Observations: {model['n_observations']:,}, pseudo R²: {model['pseudo_r_squared']:.4f}")

    print("\n📁 Generated Outputs:")
    for artifact, file_path in results['saved_files'].items():
        print(f"   • {artifact.replace('_', ' ').title()}: {Path(file_path).name}")

    print("=" * 70)


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
