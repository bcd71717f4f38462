"""CLI interface for the review dashboard."""

import asyncio
import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .client import ReviewApiClient
from .constants import (
    DEFAULT_PAGE_SIZE,
    EMPTY_STRING,
    EXIT_CODE_ERROR,
    FIRST_PAGE,
    NOT_APPLICABLE,
    REVIEW_API_BASE_URL,
    Accuracy,
    CliHelp,
    FilterField,
    LogMessage,
    OrderType,
    Performance,
    Sentiment,
)
from .dashboard import ReviewDashboard
from .models import AnalyticsSnapshot, PaginationState, Review
from .pagination import paginate
from .session import SessionContext
from .storage import ReviewStorage

app = typer.Typer(help=CliHelp.APP)
console = Console()


@app.callback()
def main(
    log_level: str = typer.Option("INFO", "--log-level", "-l", help=CliHelp.LOG_LEVEL),
) -> None:
    """Review feedback dashboard."""
    logger.remove()
    logger.add(sys.stderr, level=log_level.upper())


def _show(value: object) -> str:
    return NOT_APPLICABLE if value is None else str(value)


def _reviews_table(reviews: list[Review], pagination: PaginationState) -> Table:
    table = Table(
        title=(
            f"Reviews - page {pagination.current_page} of {pagination.total_pages} "
            f"(total: {pagination.total_items})"
        )
    )
    for header in (
        "ID",
        "Agent",
        "Location",
        "Rating",
        "Order Type",
        "Price",
        "Performance",
        "Accuracy",
        "Sentiment",
        "Complaints",
    ):
        table.add_column(header)

    for review in reviews:
        table.add_row(
            review.id,
            _show(review.agent_name),
            _show(review.location),
            _show(review.rating),
            _show(review.order_type),
            _show(review.order_price),
            _show(review.performance),
            _show(review.accuracy),
            _show(review.sentiment),
            ", ".join(review.complaints) or "None",
        )
    return table


def _metrics_tables(snapshot: AnalyticsSnapshot, total_reviews: int) -> list[Table]:
    metrics = Table(title="Key Metrics")
    metrics.add_column("Metric")
    metrics.add_column("Value")
    metrics.add_row("Average Rating", _show(snapshot.average_rating))
    metrics.add_row("Total Reviews", str(total_reviews))
    metrics.add_row("Top Agent", _show(snapshot.top_agent))
    metrics.add_row("Bottom Agent", _show(snapshot.bottom_agent))
    metrics.add_row("Most Common Complaint", _show(snapshot.most_common_complaint))

    complaints = Table(title="Most Common Complaints")
    complaints.add_column("Complaint")
    complaints.add_column("Count", justify="right")
    for complaint, count in snapshot.complaint_histogram:
        complaints.add_row(complaint, str(count))

    prices = Table(title="Orders by Price Range")
    prices.add_column("Range")
    prices.add_column("Orders", justify="right")
    for bucket, count in snapshot.price_histogram.items():
        prices.add_row(bucket, str(count))

    return [metrics, complaints, prices]


async def _show_async(
    *,
    base_url: str,
    token: str | None,
    role: str,
    page: int,
    page_size: int,
    filters: dict[FilterField, object],
    export_json: Path | None,
    export_csv: Path | None,
    export_metrics: Path | None,
) -> None:
    """Async implementation of the show command."""
    session = SessionContext(credential=token, role=role)

    async with ReviewApiClient(base_url=base_url) as client:
        dashboard = ReviewDashboard(
            data_source=client, session=session, page_size=page_size
        )
        await dashboard.load_page(FIRST_PAGE)

        for field, value in filters.items():
            if value is not None:
                dashboard.set_filter(field, value)
        await dashboard.apply_filters()

        if page != FIRST_PAGE:
            await dashboard.change_page(page)

    pagination = dashboard.pagination()
    snapshot = dashboard.metrics()

    console.print(_reviews_table(dashboard.visible_reviews(), pagination))
    for table in _metrics_tables(snapshot, pagination.total_items):
        console.print(table)

    storage = ReviewStorage()
    if export_json is not None:
        storage.save_reviews(
            reviews=dashboard.filtered_reviews(), filepath=export_json, snapshot=snapshot
        )
    if export_csv is not None:
        storage.save_reviews_csv(reviews=dashboard.filtered_reviews(), filepath=export_csv)
    if export_metrics is not None:
        storage.save_snapshot(snapshot=snapshot, filepath=export_metrics)


@app.command(help=CliHelp.SHOW_COMMAND)
def show(
    page: int = typer.Option(FIRST_PAGE, "--page", "-p", min=1, help=CliHelp.PAGE),
    page_size: int = typer.Option(
        DEFAULT_PAGE_SIZE, "--page-size", "-s", min=1, help=CliHelp.PAGE_SIZE
    ),
    location: str = typer.Option(EMPTY_STRING, "--location", help=CliHelp.LOCATION),
    order_type: OrderType = typer.Option(None, "--order-type", help=CliHelp.ORDER_TYPE),
    discount: int = typer.Option(None, "--discount", help=CliHelp.DISCOUNT),
    rating: int = typer.Option(None, "--rating", min=1, max=5, help=CliHelp.RATING),
    performance: Performance = typer.Option(
        None, "--performance", help=CliHelp.PERFORMANCE
    ),
    accuracy: Accuracy = typer.Option(None, "--accuracy", help=CliHelp.ACCURACY),
    sentiment: Sentiment = typer.Option(None, "--sentiment", help=CliHelp.SENTIMENT),
    base_url: str = typer.Option(
        REVIEW_API_BASE_URL, "--base-url", envvar="REVIEW_API_BASE_URL", help=CliHelp.BASE_URL
    ),
    token: str = typer.Option(
        None, "--token", envvar="REVIEW_API_TOKEN", help=CliHelp.TOKEN
    ),
    role: str = typer.Option(
        EMPTY_STRING, "--role", envvar="REVIEW_API_ROLE", help=CliHelp.ROLE
    ),
    export_json: Path = typer.Option(None, "--export-json", help=CliHelp.EXPORT_JSON),
    export_csv: Path = typer.Option(None, "--export-csv", help=CliHelp.EXPORT_CSV),
    export_metrics: Path = typer.Option(
        None, "--export-metrics", help=CliHelp.EXPORT_METRICS
    ),
) -> None:
    """Fetch reviews, apply filters and print the dashboard."""
    filters: dict[FilterField, object] = {
        FilterField.LOCATION: location or None,
        FilterField.ORDER_TYPE: order_type,
        FilterField.DISCOUNT_APPLIED: discount,
        FilterField.RATING: rating,
        FilterField.PERFORMANCE: performance,
        FilterField.ACCURACY: accuracy,
        FilterField.SENTIMENT: sentiment,
    }
    try:
        asyncio.run(
            _show_async(
                base_url=base_url,
                token=token,
                role=role,
                page=page,
                page_size=page_size,
                filters=filters,
                export_json=export_json,
                export_csv=export_csv,
                export_metrics=export_metrics,
            )
        )
    except Exception as e:
        logger.exception(LogMessage.ERROR_OCCURRED.format(e))
        raise typer.Exit(code=EXIT_CODE_ERROR)


async def _tag_async(
    *,
    base_url: str,
    token: str | None,
    role: str,
    review_id: str,
    performance: Performance | None,
    accuracy: Accuracy | None,
    sentiment: Sentiment | None,
) -> Review:
    """Async implementation of the tag command."""
    session = SessionContext(credential=token, role=role)
    async with ReviewApiClient(base_url=base_url) as client:
        dashboard = ReviewDashboard(
            data_source=client, session=session, load_full_collection=False
        )
        return await dashboard.update_tags(
            review_id, performance=performance, accuracy=accuracy, sentiment=sentiment
        )


@app.command(help=CliHelp.TAG_COMMAND)
def tag(
    review_id: str = typer.Argument(..., help="Id of the review to update."),
    performance: Performance = typer.Option(
        None, "--performance", help=CliHelp.PERFORMANCE
    ),
    accuracy: Accuracy = typer.Option(None, "--accuracy", help=CliHelp.ACCURACY),
    sentiment: Sentiment = typer.Option(None, "--sentiment", help=CliHelp.SENTIMENT),
    base_url: str = typer.Option(
        REVIEW_API_BASE_URL, "--base-url", envvar="REVIEW_API_BASE_URL", help=CliHelp.BASE_URL
    ),
    token: str = typer.Option(
        None, "--token", envvar="REVIEW_API_TOKEN", help=CliHelp.TOKEN
    ),
    role: str = typer.Option(
        EMPTY_STRING, "--role", envvar="REVIEW_API_ROLE", help=CliHelp.ROLE
    ),
) -> None:
    """Update the tags of a single review."""
    try:
        updated = asyncio.run(
            _tag_async(
                base_url=base_url,
                token=token,
                role=role,
                review_id=review_id,
                performance=performance,
                accuracy=accuracy,
                sentiment=sentiment,
            )
        )
    except Exception as e:
        logger.exception(LogMessage.ERROR_OCCURRED.format(e))
        raise typer.Exit(code=EXIT_CODE_ERROR)

    console.print(_reviews_table([updated], paginate(1, FIRST_PAGE, 1)))
