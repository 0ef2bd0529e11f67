#!/usr/bin/env python3
"""
btreetrace HTTP Server
======================

JSON API over one TraceSession: submit keys, read the step log, seek into
it, change the branching factor and fetch export records. Intended for a
single front end; requests are served one at a time against the same tree.
"""

import sys
import time
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from btreetrace import __version__
from btreetrace.config import get_config
from btreetrace.errors import BTreeTraceError, StepIndexError
from btreetrace.keys import parse_degree
from btreetrace.logconfig import configure_logging
from btreetrace.session import TraceSession

logger = logging.getLogger(__name__)


# Pydantic models
class KeysRequest(BaseModel):
    """Keys to insert, either as a list or as comma-separated text"""
    keys: Optional[List[int]] = None
    text: Optional[str] = None

class DegreeRequest(BaseModel):
    max_degree: int

class TreeResponse(BaseModel):
    max_degree: int
    max_keys: int
    min_children: int
    min_keys: int
    inserted_keys: List[int]
    current_step: int
    total_steps: int
    header: str
    tree: Dict[str, Any]

class BatchResponse(BaseModel):
    accepted: int
    total_steps: int
    steps: List[Dict[str, Any]]


def create_app(session: Optional[TraceSession] = None) -> FastAPI:
    """Create the FastAPI application around a session"""
    session = session or TraceSession()
    app = FastAPI(
        title="btreetrace API",
        description="Step-recording B-Tree engine",
        version=__version__,
    )
    app.state.session = session
    app.state.start_time = time.time()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = (time.time() - start_time) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({duration:.1f}ms)")
        return response

    def tree_response() -> TreeResponse:
        tree = session.tree
        return TreeResponse(
            max_degree=tree.max_degree,
            max_keys=tree.max_keys,
            min_children=tree.min_children,
            min_keys=tree.min_keys,
            inserted_keys=tree.get_inserted_keys(),
            current_step=session.player.current,
            total_steps=len(session.player.steps),
            header=session.header(),
            tree=session.current_tree().to_dict(),
        )

    def batch_response(accepted: int) -> BatchResponse:
        steps = session.player.steps
        return BatchResponse(
            accepted=accepted,
            total_steps=len(steps),
            steps=[step.to_dict() for step in steps],
        )

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": __version__,
            "timestamp": datetime.now().isoformat(),
            "uptime": time.time() - app.state.start_time,
        }

    @app.get("/tree", response_model=TreeResponse)
    async def get_tree():
        """Counters, replay log and the snapshot at the cursor"""
        return tree_response()

    @app.post("/keys", response_model=BatchResponse)
    async def insert_keys(request: KeysRequest):
        """Insert one batch of keys"""
        try:
            if request.keys is not None:
                accepted = session.insert_keys(request.keys)
            elif request.text is not None:
                accepted = session.insert_text(request.text)
            else:
                raise HTTPException(status_code=400, detail="Provide 'keys' or 'text'")
        except BTreeTraceError as e:
            raise HTTPException(status_code=400, detail=e.message)
        return batch_response(accepted)

    @app.get("/steps", response_model=BatchResponse)
    async def get_steps():
        """Step log of the most recent batch"""
        return batch_response(0)

    @app.get("/steps/{index}")
    async def get_step(index: int):
        """Move the cursor to a step and return it"""
        try:
            step = session.player.step_at(index)
        except StepIndexError as e:
            raise HTTPException(status_code=404, detail=e.message)
        session.player.seek(index)
        return step.to_dict()

    @app.post("/degree", response_model=BatchResponse)
    async def change_degree(request: DegreeRequest):
        """Change branching factor; existing keys are replayed"""
        try:
            session.change_degree(parse_degree(str(request.max_degree)))
        except BTreeTraceError as e:
            raise HTTPException(status_code=400, detail=e.message)
        return batch_response(len(session.tree))

    @app.post("/reset", response_model=TreeResponse)
    async def reset():
        """Start over with an empty tree"""
        session.reset()
        return tree_response()

    @app.get("/export")
    async def export():
        """Export record for the snapshot at the cursor"""
        return session.export_record()

    return app


def main():
    """Main entry point for the HTTP server"""
    config = get_config()
    configure_logging(config.log_level)

    try:
        app = create_app()
        logger.info(f"Starting btreetrace server on {config.host}:{config.port}")
        uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
    except KeyboardInterrupt:
        print("\nbtreetrace server stopped by user")
    except BTreeTraceError as e:
        print(f"btreetrace server failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
