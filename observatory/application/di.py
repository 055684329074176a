from dishka import AsyncContainer, make_async_container

from observatory.config import Config
from observatory.domain.report.util.di import ReportProvider
from observatory.infrastructure.http.di import HttpProvider
from observatory.infrastructure.source.di import SourceProvider
from observatory.util.di.scope import Scope


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        HttpProvider(),
        SourceProvider(),
        ReportProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
