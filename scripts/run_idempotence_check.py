#!/usr/bin/env python3
# ========================
# scripts/run_idempotence_check.py
# ========================

"""
Runs the pipeline twice on the same generated snapshot and checks that the
persisted Parquet artifacts are byte-identical.
"""

import filecmp
import os
import sys

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from superhost_eda.pipeline import ListingsPipeline
from superhost_eda.utils import Config, ListingsGenerator, setup_logging


def main():
    """Generate a snapshot, run the pipeline twice, compare artifacts."""

    if len(sys.argv) > 1:
        try:
            num_rows = int(sys.argv[1])
        except ValueError:
            print("Usage: python run_idempotence_check.py [num_rows]")
            print("Example: python run_idempotence_check.py 50000")
            sys.exit(1)
    else:
        num_rows = 20_000

    setup_logging(log_level="WARNING")

    input_file = 'data/raw/idempotence_listings.csv.gz'
    output_dirs = ['data/idempotence/run_1', 'data/idempotence/run_2']

    print("=" * 60)
    print("PIPELINE IDEMPOTENCE CHECK")
    print("=" * 60)
    print(f"Snapshot size: {num_rows:,} rows")
    print(f"Input file: {input_file}")
    print("=" * 60)

    print(f"\n🔄 Step 1: Generating {num_rows:,} rows of sample data...")
    ListingsGenerator(seed=42).generate_dataset(input_file, num_rows)

    print("\n🔄 Step 2: Running the pipeline twice...")
    runs = []
    for output_dir in output_dirs:
        config = Config({'output_dir': output_dir, 'make_plots': False, 'fit_model': False})
        runs.append(ListingsPipeline(config).run(input_file))

    print("\n🔄 Step 3: Comparing artifacts...")
    mismatched = []
    for artifact in ('raw_copy', 'select_variables', 'analysis_dataset'):
        first = runs[0]['saved_files'][artifact]
        second = runs[1]['saved_files'][artifact]
        if filecmp.cmp(first, second, shallow=False):
            print(f"✅ {os.path.basename(first)}: identical ({os.path.getsize(first):,} bytes)")
        else:
            mismatched.append(artifact)
            print(f"❌ {os.path.basename(first)}: DIFFERS")

    if mismatched:
        print(f"\n⚠️  {len(mismatched)} artifact(s) differ between runs!")
        sys.exit(1)
    print("\n✅ All artifacts are byte-identical across runs.")


if __name__ == '__main__':
    main()
