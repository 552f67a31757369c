"""
FastAPI server exposing topics and their grouped viewpoints as JSON.

This provides REST API endpoints for:
- Listing the newest topics
- Fetching one topic with viewpoints grouped by stance
- Health checks

Responses carry a Cache-Control header derived from the configured
revalidation window so a fronting cache knows when to re-fetch.

Usage:
    uvicorn topicboard.api.server:create_app --factory --port 8000
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ..config.settings import Settings, load_settings
from ..ingest.record_store import RecordStoreError
from ..logging_config import configure_logging
from ..pipeline.assembler import TopicPipeline
from ..pipeline.models import TopicSummary, TopicViewModel, Viewpoint

logger = logging.getLogger(__name__)


# Pydantic models
class ViewpointOut(BaseModel):
    id: str
    text: str
    url: Optional[str] = None
    author: Optional[str] = None
    stance: str


class StanceGroupOut(BaseModel):
    stance: str
    viewpoints: List[ViewpointOut]


class TopicDetail(BaseModel):
    id: str
    question: str
    hashtags: List[str]
    buckets: List[StanceGroupOut]
    viewpoint_count: int


class TopicListItem(BaseModel):
    id: str
    question: str
    hashtags: List[str]


class HealthStatus(BaseModel):
    status: str


def _viewpoint_out(viewpoint: Viewpoint) -> ViewpointOut:
    return ViewpointOut(
        id=viewpoint.id,
        text=viewpoint.text,
        url=viewpoint.url,
        author=viewpoint.author,
        stance=viewpoint.stance.value,
    )


def topic_detail(view: TopicViewModel) -> TopicDetail:
    """Convert a view model to its response body (unrecognized stances omitted)."""
    return TopicDetail(
        id=view.topic_id,
        question=view.question,
        hashtags=list(view.hashtags),
        buckets=[
            StanceGroupOut(stance=g.stance.value, viewpoints=[_viewpoint_out(v) for v in g.members])
            for g in view.buckets
        ],
        viewpoint_count=view.viewpoint_count,
    )


def topic_list_item(summary: TopicSummary) -> TopicListItem:
    return TopicListItem(id=summary.topic_id, question=summary.question, hashtags=list(summary.hashtags))


def cache_control(revalidate_seconds: int) -> str:
    return f"public, s-maxage={revalidate_seconds}, stale-while-revalidate"


def create_app(settings: Optional[Settings] = None, pipeline: Optional[TopicPipeline] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Loaded settings (default: load_settings(), fatal if incomplete)
        pipeline: Pre-built pipeline (default: built from settings)

    Raises:
        ConfigError: If required settings are missing
    """
    if settings is None:
        settings = pipeline.settings if pipeline is not None else load_settings()

    configure_logging(settings.log_level, settings.log_file)
    if pipeline is None:
        pipeline = TopicPipeline.from_settings(settings)

    logger.info(f"Starting topic API with {settings!r}")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        pipeline.close()

    app = FastAPI(
        title="Topicboard API",
        lifespan=lifespan,
        description="Debate topics and viewpoints grouped by stance",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.pipeline = pipeline

    @app.get("/health", response_model=HealthStatus)
    def health():
        return HealthStatus(status="ok")

    @app.get("/topics", response_model=List[TopicListItem])
    def list_topics(response: Response, limit: Optional[int] = Query(default=None, ge=1, le=100)):
        """Newest topics."""
        try:
            summaries = pipeline.recent_topics(limit)
        except RecordStoreError as e:
            logger.error(f"Topic list fetch failed: {e}")
            raise HTTPException(status_code=502, detail="Record store request failed")

        response.headers["Cache-Control"] = cache_control(settings.revalidate_seconds)
        return [topic_list_item(s) for s in summaries]

    @app.get("/topics/{topic_id}", response_model=TopicDetail)
    def get_topic(topic_id: str, response: Response):
        """One topic with its viewpoints grouped by stance."""
        try:
            view = pipeline.topic_view(topic_id)
        except RecordStoreError as e:
            logger.error(f"Topic {topic_id} fetch failed: {e}")
            raise HTTPException(status_code=502, detail="Record store request failed")

        if view is None:
            raise HTTPException(status_code=404, detail=f"Topic not found: {topic_id}")

        response.headers["Cache-Control"] = cache_control(settings.revalidate_seconds)
        return topic_detail(view)

    return app
