from fastapi import Request

from app.core.config import Settings
from app.services.bulk import BulkOperationExecutor
from app.services.review_aggregator import ReviewAggregator
from app.services.submission_store import SubmissionStore
from app.services.taxonomy import TaxonomyRegistry


def get_taxonomy(request: Request) -> TaxonomyRegistry:
    return request.app.state.taxonomy


def get_store(request: Request) -> SubmissionStore:
    return request.app.state.store


def get_reviews(request: Request) -> ReviewAggregator:
    return request.app.state.reviews


def get_bulk(request: Request) -> BulkOperationExecutor:
    return request.app.state.bulk


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
