"""Main entry point for the reqflow CLI.

Sets up the Typer application, wires dependencies in a single Composition
Root, and runs requests through the orchestration pipeline.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import typer
from typing_extensions import Annotated

from reqflow.core.orchestrator import RequestOrchestrator
from reqflow.core.session import ClientSession
from reqflow.domain.events.request_events import DomainEvent, RequestServedFromCache
from reqflow.domain.models.errors import RequestCancelled, RequestError
from reqflow.infrastructure.cli.display import ConsoleDisplay
from reqflow.infrastructure.config.orchestrator_config import OrchestratorConfig
from reqflow.infrastructure.config.settings import get_base_url, get_timeout, load_configuration
from reqflow.infrastructure.http.httpx_transport import HttpxTransport
from reqflow.infrastructure.monitoring.event_dispatcher import EventDispatcher
from reqflow.infrastructure.monitoring.logger_setup import setup_logging_from_settings

logger = logging.getLogger(__name__)


# --- Dependency Injection Container (Manual) ---

def create_dependencies(base_url: Optional[str] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one CLI invocation.

    This acts as the Composition Root.
    """
    load_configuration()
    setup_logging_from_settings(default_level=logging.WARNING)

    dependencies: Dict[str, Any] = {}
    dependencies['ui'] = ConsoleDisplay()
    dependencies['config'] = OrchestratorConfig.from_settings()
    dependencies['events'] = EventDispatcher()
    dependencies['transport'] = HttpxTransport(base_url=base_url or get_base_url(), timeout=get_timeout())
    dependencies['orchestrator'] = RequestOrchestrator(
        transport=dependencies['transport'],
        config=dependencies['config'],
        notifier=dependencies['ui'],
        events=dependencies['events'],
    )
    dependencies['session'] = ClientSession(dependencies['orchestrator'])
    logger.info("All dependencies initialized successfully.")
    return dependencies


# --- Typer App Definition ---
app = typer.Typer(
    name="reqflow",
    help="reqflow: resilient API calls with throttling, caching, deduplication and retries.",
    add_completion=False,
)


def _parse_params(pairs: Optional[List[str]]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got '{pair}'", param_hint="--param")
        params[key] = value
    return params


def _parse_body(data: Optional[str]) -> Any:
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"Body is not valid JSON: {e}", param_hint="--data")


async def _fetch(
    dependencies: Dict[str, Any],
    method: str,
    url: str,
    params: Dict[str, str],
    body: Any,
    no_cache: bool,
    repeat: int,
    token: Optional[str],
) -> int:
    ui: ConsoleDisplay = dependencies['ui']
    session: ClientSession = dependencies['session']
    cache_hits: List[DomainEvent] = []

    def record_cache_hit(event: DomainEvent) -> None:
        if isinstance(event, RequestServedFromCache):
            cache_hits.append(event)

    dependencies['events'].subscribe(record_cache_hit)
    if token:
        session.sign_in(token)
    try:
        for _ in range(repeat):
            hits_before = len(cache_hits)
            try:
                response = await session.request(method, url, params=params, body=body, no_cache=no_cache)
            except RequestCancelled:
                continue
            except RequestError as e:
                ui.display_error(str(e))
                return 1
            ui.display_response(response, source="cache" if len(cache_hits) > hits_before else "network")
        return 0
    finally:
        await session.aclose()


# --- CLI Commands ---

@app.command()
def fetch(
    url: Annotated[str, typer.Argument(help="URL or path (relative to the base URL) to request.")],
    method: Annotated[str, typer.Option("--method", "-X", help="HTTP method.")] = "GET",
    param: Annotated[Optional[List[str]], typer.Option("--param", "-p", help="Query parameter as key=value; repeatable.")] = None,
    data: Annotated[Optional[str], typer.Option("--data", "-d", help="JSON request body.")] = None,
    no_cache: Annotated[bool, typer.Option("--no-cache", help="Bypass the response cache.")] = False,
    repeat: Annotated[int, typer.Option("--repeat", "-n", min=1, help="Issue the call N times in sequence.")] = 1,
    token: Annotated[Optional[str], typer.Option("--token", help="Bearer token to sign in with.")] = None,
    base_url: Annotated[Optional[str], typer.Option("--base-url", help="Overrides api.base_url.")] = None,
):
    """Send a request through the orchestration pipeline and show the response."""
    params = _parse_params(param)
    body = _parse_body(data)
    dependencies = create_dependencies(base_url=base_url)
    exit_code = asyncio.run(_fetch(dependencies, method, url, params, body, no_cache, repeat, token))
    raise typer.Exit(code=exit_code)


@app.command()
def health(
    path: Annotated[str, typer.Option("--path", help="Health check path.")] = "/api/health",
    base_url: Annotated[Optional[str], typer.Option("--base-url", help="Overrides api.base_url.")] = None,
):
    """Check whether the API is reachable."""
    dependencies = create_dependencies(base_url=base_url)
    orchestrator: RequestOrchestrator = dependencies['orchestrator']

    async def probe() -> bool:
        try:
            return await orchestrator.check_connection(path)
        finally:
            await orchestrator.aclose()

    if asyncio.run(probe()):
        dependencies['ui'].display_info(f"API reachable at {path}.")
        return
    dependencies['ui'].display_error(f"API unreachable at {path}.")
    raise typer.Exit(code=1)


@app.command(name="config")
def show_config():
    """Print the effective orchestration configuration."""
    load_configuration()
    ConsoleDisplay().display_config(OrchestratorConfig.from_settings().as_dict())


def cli_entry_point():
    """Function called by the console script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
