# ========================
# src/superhost_eda/utils/data_generator.py
# ========================

"""
Data Generation Utilities

Synthetic listings snapshots shaped like the published Inside Airbnb
`listings.csv.gz`, with the inconsistencies the pipeline has to handle.
"""

import csv
import gzip
import logging
import math
import random
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

RAW_COLUMNS = [
    'id', 'listing_url', 'name', 'host_id', 'host_name', 'host_response_time',
    'host_response_rate', 'host_is_superhost', 'host_total_listings_count',
    'neighbourhood_cleansed', 'room_type', 'accommodates', 'bathrooms',
    'bedrooms', 'price', 'number_of_reviews', 'review_scores_rating',
    'review_scores_accuracy', 'review_scores_value',
]


class ListingsGenerator:
    """
    Generator for realistic raw listings files.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize data generator.

        Args:
            seed (int): Random seed for reproducible data generation
        """
        self.rng = random.Random(seed)
        self._initialize_data_patterns()
        logger.info(f"ListingsGenerator initialized with seed: {seed}")

    def _initialize_data_patterns(self) -> None:
        """Initialize data patterns and distributions."""
        self.neighbourhoods = [
            ("Williamsburg", 1.2), ("Harlem", 0.8), ("Bedford-Stuyvesant", 0.85),
            ("Midtown", 1.6), ("Astoria", 0.9), ("Upper West Side", 1.4),
            ("Bushwick", 0.8), ("East Village", 1.3), ("Flushing", 0.7),
            ("Chelsea", 1.5),
        ]
        self.room_types = [
            ("Entire home/apt", 1.6), ("Private room", 0.7),
            ("Shared room", 0.4), ("Hotel room", 1.3),
        ]
        # label -> (weight, superhost log-odds shift)
        self.response_times = {
            "within an hour": (0.45, 0.8),
            "within a few hours": (0.18, 0.3),
            "within a day": (0.12, -0.2),
            "a few days or more": (0.05, -1.0),
            "N/A": (0.20, -0.8),
        }
        self.malformed_prices = ["", "TBD", "$", "call for price", "$12.50"]

    def generate_rows(self, num_rows: int,
                      multi_listing_share: float = 0.3,
                      outlier_rate: float = 0.02,
                      malformed_price_rate: float = 0.01,
                      missing_superhost_rate: float = 0.03) -> List[Dict[str, Any]]:
        """
        Generate raw listing rows.

        Args:
            num_rows (int): Number of listing rows
            multi_listing_share (float): Approximate share of rows owned by
                hosts with several listings
            outlier_rate (float): Share of prices at or above 1000
            malformed_price_rate (float): Share of prices that are not whole amounts
            missing_superhost_rate (float): Share of empty superhost flags

        Returns:
            list[dict]: Rows keyed by RAW_COLUMNS
        """
        rows = []
        host_ids = self._assign_hosts(num_rows, multi_listing_share)
        listings_per_host: Dict[int, int] = {}
        for host_id in host_ids:
            listings_per_host[host_id] = listings_per_host.get(host_id, 0) + 1

        labels = list(self.response_times)
        weights = [self.response_times[label][0] for label in labels]

        for i, host_id in enumerate(host_ids):
            neighbourhood, area_factor = self.rng.choice(self.neighbourhoods)
            room_type, room_factor = self.rng.choice(self.room_types)
            bedrooms = self.rng.choice([1, 1, 1, 2, 2, 3, 4])
            response_time = self.rng.choices(labels, weights=weights)[0]

            number_of_reviews = max(0, int(self.rng.expovariate(1 / 40)))
            rating = None
            if number_of_reviews > 0:
                rating = round(min(5.0, max(1.0, self.rng.gauss(4.7, 0.3))), 2)

            superhost = self._draw_superhost(response_time, rating)
            if self.rng.random() < missing_superhost_rate:
                superhost_text = ""
            else:
                superhost_text = "t" if superhost else "f"

            rows.append({
                'id': 10_000_000 + i,
                'listing_url': f"https://www.airbnb.com/rooms/{10_000_000 + i}",
                'name': f"{room_type} in {neighbourhood}",
                'host_id': host_id,
                'host_name': f"Host {host_id}",
                'host_response_time': response_time,
                'host_response_rate': "N/A" if response_time == "N/A" else f"{self.rng.randint(50, 100)}%",
                'host_is_superhost': superhost_text,
                'host_total_listings_count': listings_per_host[host_id] + self.rng.choice([0, 0, 0, 1]),
                'neighbourhood_cleansed': neighbourhood,
                'room_type': room_type,
                'accommodates': bedrooms * 2,
                'bathrooms': self.rng.choice(["1.0", "1.0", "1.5", "2.0", ""]),
                'bedrooms': bedrooms,
                'price': self._draw_price(area_factor * room_factor * bedrooms, outlier_rate, malformed_price_rate),
                'number_of_reviews': number_of_reviews,
                'review_scores_rating': "" if rating is None else rating,
                'review_scores_accuracy': "" if rating is None else round(min(5.0, rating + self.rng.uniform(-0.2, 0.2)), 2),
                'review_scores_value': "" if rating is None else round(min(5.0, rating + self.rng.uniform(-0.3, 0.1)), 2),
            })

        return rows

    def _assign_hosts(self, num_rows: int, multi_listing_share: float) -> List[int]:
        host_ids = []
        next_host = 1000
        while len(host_ids) < num_rows:
            if self.rng.random() < multi_listing_share:
                count = self.rng.randint(2, 5)
            else:
                count = 1
            host_ids.extend([next_host] * count)
            next_host += 1
        host_ids = host_ids[:num_rows]
        self.rng.shuffle(host_ids)
        return host_ids

    def _draw_superhost(self, response_time: str, rating: Optional[float]) -> bool:
        shift = self.response_times[response_time][1]
        rating_term = 2.0 * ((rating if rating is not None else 4.5) - 4.6)
        log_odds = -0.9 + shift + rating_term
        probability = 1 / (1 + math.exp(-log_odds))
        return self.rng.random() < probability

    def _draw_price(self, factor: float, outlier_rate: float, malformed_rate: float) -> str:
        roll = self.rng.random()
        if roll < malformed_rate:
            return self.rng.choice(self.malformed_prices)
        if roll < malformed_rate + outlier_rate:
            amount = self.rng.randint(1000, 15000)
        else:
            amount = max(10, min(999, int(self.rng.lognormvariate(4.4, 0.5) * factor)))
        return f"${amount:,}.00"

    def generate_dataset(self, file_path: str, num_rows: int = 1000, **kwargs) -> Dict[str, Any]:
        """
        Generate a raw snapshot file. A `.gz` suffix produces gzip output.

        Args:
            file_path (str): Destination path
            num_rows (int): Number of rows to generate
            **kwargs: Passed to generate_rows

        Returns:
            dict: Generation statistics
        """
        rows = self.generate_rows(num_rows, **kwargs)

        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if path.suffix == '.gz':
            handle = gzip.open(path, 'wt', newline='', encoding='utf-8')
        else:
            handle = open(path, 'w', newline='', encoding='utf-8')
        with handle as f:
            writer = csv.DictWriter(f, fieldnames=RAW_COLUMNS)
            writer.writeheader()
            writer.writerows(rows)

        host_counts: Dict[Any, int] = {}
        for row in rows:
            host_counts[row['host_id']] = host_counts.get(row['host_id'], 0) + 1

        stats = {
            'total_rows': len(rows),
            'file_path': str(path),
            'unique_hosts': len(host_counts),
            'single_listing_hosts': sum(1 for count in host_counts.values() if count == 1),
            'response_time_na': sum(1 for row in rows if row['host_response_time'] == 'N/A'),
            'missing_superhost': sum(1 for row in rows if row['host_is_superhost'] == ''),
            'missing_rating': sum(1 for row in rows if row['review_scores_rating'] == ''),
        }
        logger.info(f"Generated {stats['total_rows']:,} listings into {path}")
        return stats
