"""
Configuration API endpoints.

The installation has exactly one configuration record. Writes replace the
whole record and carry a version token; a write whose version is not greater
than the stored version is rejected with 409 so an older in-flight write can
never overwrite a newer one.
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite

from vibe_kanban_web.api.deps import DbSession
from vibe_kanban_web.db.models import SINGLETON_ID, AppConfig
from vibe_kanban_web.schemas.models import (
    ConfigPayload,
    ConfigResponse,
    ConfigUpdateRequest,
    EditorConfigModel,
    ExecutorConfigModel,
    VersionConflictDetail,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/config", tags=["config"])

# INSERT constructs supporting ON CONFLICT DO NOTHING, by dialect name
INSERT_BY_DIALECT = {"sqlite": sqlite.insert, "postgresql": postgresql.insert}


# =============================================================================
# Helpers
# =============================================================================


def get_default_config() -> ConfigPayload:
    """Get the record a fresh installation starts with."""
    return ConfigPayload()


def payload_to_columns(payload: ConfigPayload) -> dict[str, Any]:
    """Map an API payload onto ``AppConfig`` column values."""
    return {
        "disclaimer_acknowledged": payload.disclaimer_acknowledged,
        "onboarding_acknowledged": payload.onboarding_acknowledged,
        "github_login_acknowledged": payload.github_login_acknowledged,
        "telemetry_acknowledged": payload.telemetry_acknowledged,
        "analytics_enabled": payload.analytics_enabled,
        "executor_json": payload.executor.model_dump(mode="json"),
        "editor_json": payload.editor.model_dump(mode="json"),
        "theme": str(payload.theme),
    }


def to_response(config: AppConfig) -> ConfigResponse:
    return ConfigResponse(
        config=ConfigPayload(
            disclaimer_acknowledged=config.disclaimer_acknowledged,
            onboarding_acknowledged=config.onboarding_acknowledged,
            github_login_acknowledged=config.github_login_acknowledged,
            telemetry_acknowledged=config.telemetry_acknowledged,
            analytics_enabled=config.analytics_enabled,
            executor=ExecutorConfigModel.model_validate(config.executor_json),
            editor=EditorConfigModel.model_validate(config.editor_json),
            theme=config.theme,
        ),
        version=config.version,
    )


async def get_or_create_config(db: DbSession) -> AppConfig:
    """
    Fetch the singleton row, creating it with defaults on first use.

    The insert is a no-op when a concurrent request created the row first.
    """
    config = await db.get(AppConfig, SINGLETON_ID)
    if config is not None:
        return config

    insert = INSERT_BY_DIALECT[db.get_bind().dialect.name]
    result = await db.execute(
        insert(AppConfig)
        .values(id=SINGLETON_ID, version=0, **payload_to_columns(get_default_config()))
        .on_conflict_do_nothing(index_elements=[AppConfig.id])
    )
    if result.rowcount:
        logger.info("Created default configuration record")

    return await db.get_one(AppConfig, SINGLETON_ID)


# =============================================================================
# API Endpoints
# =============================================================================


@router.get("", response_model=ConfigResponse)
async def get_config(db: DbSession) -> ConfigResponse:
    """
    Get the configuration record.

    Creates the default record (all acknowledgements false) on first call.
    """
    config = await get_or_create_config(db)
    await db.commit()
    return to_response(config)


@router.put(
    "",
    response_model=ConfigResponse,
    responses={status.HTTP_409_CONFLICT: {"description": "Stale version"}},
)
async def update_config(body: ConfigUpdateRequest, db: DbSession) -> ConfigResponse:
    """
    Replace the configuration record.

    The write is a compare-and-set on the version column: it applies only if
    ``body.version`` is greater than the stored version.
    """
    config = await get_or_create_config(db)

    result = await db.execute(
        update(AppConfig)
        .where(AppConfig.id == SINGLETON_ID, AppConfig.version < body.version)
        .values(**payload_to_columns(body.config), version=body.version)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        await db.refresh(config)
        logger.warning(
            "Rejected stale config write: attempted version %d, current version %d",
            body.version,
            config.version,
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=VersionConflictDetail(
                message="Configuration version is stale",
                current_version=config.version,
                attempted_version=body.version,
            ).model_dump(),
        )

    await db.commit()
    await db.refresh(config)
    logger.info("Stored config version %d", config.version)
    return to_response(config)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def reset_config(db: DbSession) -> None:
    """
    Reset the configuration record to first-install defaults.

    The version still moves forward so writes issued before the reset are rejected.
    """
    config = await get_or_create_config(db)
    for column, value in payload_to_columns(get_default_config()).items():
        setattr(config, column, value)
    config.version += 1
    await db.commit()
    logger.info("Configuration reset to defaults at version %d", config.version)
