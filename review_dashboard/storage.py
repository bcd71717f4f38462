"""Export of filtered reviews and analytics snapshots."""

import json
from pathlib import Path
from typing import Any

import polars as pl
from loguru import logger

from .constants import CSV_LIST_SEPARATOR, JSON_INDENT, LogMessage
from .models import AnalyticsSnapshot, Review


class ReviewStorage:
    """Handles saving reviews and analytics results to disk."""

    def save_reviews(
        self,
        *,
        reviews: list[Review],
        filepath: Path | str,
        snapshot: AnalyticsSnapshot | None = None,
    ) -> None:
        """Save reviews, and optionally their metrics, to a JSON file.

        Args:
            reviews: Reviews to save.
            filepath: Path where the JSON file should be saved.
            snapshot: Metrics to store alongside the reviews.
        """
        filepath = Path(filepath)

        data: dict[str, Any] = {"reviews": [review.to_dict() for review in reviews]}
        if snapshot is not None:
            data["metrics"] = snapshot.to_dict()

        with filepath.open("w") as f:
            json.dump(data, f, indent=JSON_INDENT, default=str)

        logger.success(LogMessage.SAVED_REVIEWS.format(len(reviews), filepath))

    def save_reviews_csv(self, *, reviews: list[Review], filepath: Path | str) -> None:
        """Save reviews to a CSV file using Polars, one row per review.

        Complaint lists are joined into a single cell.

        Args:
            reviews: Reviews to save.
            filepath: Path where the CSV file should be saved.
        """
        filepath = Path(filepath)

        if not reviews:
            logger.warning("No reviews to save to CSV")
            return

        rows = []
        for review in reviews:
            row = review.to_dict()
            row["complaints"] = CSV_LIST_SEPARATOR.join(review.complaints)
            # Keep numeric columns a single dtype
            for key in ("order_price", "discount_applied"):
                if row[key] is not None:
                    row[key] = float(row[key])
            rows.append(row)

        df = pl.DataFrame(rows, infer_schema_length=None)
        df.write_csv(filepath)

        logger.success(LogMessage.SAVED_REVIEWS.format(len(df), filepath))

    def save_snapshot(self, *, snapshot: AnalyticsSnapshot, filepath: Path | str) -> None:
        """Save an analytics snapshot to a JSON file."""
        filepath = Path(filepath)

        with filepath.open("w") as f:
            json.dump(snapshot.to_dict(), f, indent=JSON_INDENT, default=str)

        logger.success(LogMessage.SAVED_SNAPSHOT.format(filepath))
