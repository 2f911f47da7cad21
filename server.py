"""
QuizPortal Server - Powered by AgentFS + Claude Agent SDK

FastAPI server with:
- Identity reconciliation (provider login + local guest)
- Per-identity question bank, bookmarks and quiz history in AgentFS
- Timed quiz sessions with single submission
- Question import via Claude generation
"""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quizportal.config import get_config, reload_config
from quizportal.controller import QuizPortalController
from quizportal.identity import ExternalIdentityProvider
from quizportal.router import router as quizportal_router

logger = logging.getLogger(__name__)

# =============================================================================
# LIFESPAN
# =============================================================================


def create_app(controller: QuizPortalController | None = None) -> FastAPI:
    """Cria a aplicacao FastAPI.

    Args:
        controller: Controller pronto (testes). Se None, o lifespan abre
            os AgentFS configurados e monta o controller.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        load_dotenv()
        config = reload_config()
        logging.basicConfig(
            level=config.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        logger.info("Iniciando QuizPortal...")

        opened = []
        if controller is None:
            from agentfs_sdk import AgentFS, AgentFSOptions

            agentfs = await AgentFS.open(AgentFSOptions(id=config.agentfs_id))
            local_agentfs = await AgentFS.open(AgentFSOptions(id=config.local_agentfs_id))
            opened = [agentfs, local_agentfs]
            app.state.controller = QuizPortalController.create(
                agentfs=agentfs,
                local_agentfs=local_agentfs,
                provider=ExternalIdentityProvider(),
                config=config,
            )
        else:
            app.state.controller = controller

        await app.state.controller.start()
        logger.info(f"QuizPortal pronto ({config.environment})")

        yield

        await app.state.controller.shutdown()
        for fs in opened:
            try:
                await fs.close()
            except Exception as e:
                logger.warning(f"Falha ao fechar AgentFS: {e}")
        logger.info("QuizPortal encerrado")

    app = FastAPI(
        title="QuizPortal",
        description="Quiz backend powered by AgentFS and Claude Agent SDK",
        version="1.0.0",
        lifespan=lifespan,
    )
    if controller is not None:
        app.state.controller = controller

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        """Health check detalhado."""
        current = getattr(app.state, "controller", None)
        return {
            "status": "healthy" if current is not None else "starting",
            "environment": os.getenv("ENVIRONMENT", get_config().environment),
            "auth_state": current.auth_state.value if current is not None else None,
            "config": get_config().to_dict(),
        }

    @app.post("/config/reload")
    async def reload_app_config():
        """Recarrega configuracao a partir do .env e do ambiente."""
        load_dotenv(override=True)
        new_config = reload_config()
        current = getattr(app.state, "controller", None)
        if current is not None:
            current.apply_config(new_config)
        return {
            "success": True,
            "message": "Configuration reloaded from .env",
            "config": new_config.to_dict(),
        }

    app.include_router(quizportal_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8001")))
