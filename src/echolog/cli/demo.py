"""Demo commands: walk through every echo kind and the question flow."""

from __future__ import annotations

import asyncio
from dataclasses import replace

import typer

from echolog.cli._config import get_config
from echolog.cli._errors import handle_error
from echolog.errors import QuestionTimeout
from echolog.facade import Echo

app = typer.Typer(help="Run the built-in demonstrations.")


async def _run_echoes(echo: Echo) -> None:
    await echo.log("App started")
    await echo.warn("Low memory warning")
    await echo.objekt({"service": "echolog", "status": "running"})
    await echo.error(RuntimeError("Something went wrong"))
    await echo.log("")
    await echo.log("flags:", True, None, {"retries": 3})


@app.command()
def echoes(
    pace_ms: int = typer.Option(None, "--pace-ms", help="Delay between echoes (ms)."),
    full: bool = typer.Option(False, "--full", help="Dump whole records as JSON."),
    sender: str = typer.Option(None, "--sender", "-s", help="Sender id on each echo."),
) -> None:
    """Emit one echo of each kind, then list the history."""
    overrides: dict = {}
    if full:
        overrides["compact_output"] = False
    if pace_ms is not None:
        overrides["pace_ms"] = pace_ms
    if sender is not None:
        overrides["sender_id"] = sender
    try:
        config = replace(get_config(), **overrides)
    except ValueError as err:
        handle_error(str(err))
    echo = Echo.from_config(config)

    try:
        asyncio.run(_run_echoes(echo))
    finally:
        echo.close()

    typer.echo("")
    typer.echo(f"{len(echo.history)} echoes recorded:")
    for record in echo.history:
        typer.echo(f"  {record.time}  {record.kind.value:<8} {record.sender or '-'}")


async def _run_question(
    echo: Echo, text: str, answer: str | None, after: float, late_answer: str | None
) -> str:
    async def responder() -> None:
        await asyncio.sleep(after)
        echo.answer(text, answer)
        if late_answer is not None:
            await asyncio.sleep(after)
            echo.answer(text, late_answer)

    if answer is not None:
        echo.submit(responder())
    try:
        result = await echo.question(text)
    finally:
        await echo.drain()
    await echo.log(f"ANSWERED {result}")
    return result


@app.command()
def question(
    text: str = typer.Argument("Do you want to continue (yes/no)?", help="Question text."),
    answer: str = typer.Option(None, "--answer", "-a", help="Answer to publish."),
    after: float = typer.Option(0.5, "--after", help="Seconds before answering."),
    late_answer: str = typer.Option(
        None, "--late-answer", help="Second answer published afterwards (ignored)."
    ),
    timeout_ms: int = typer.Option(None, "--timeout-ms", help="Answer timeout (ms)."),
    sender: str = typer.Option(None, "--sender", "-s", help="Sender id on each echo."),
) -> None:
    """Ask a question and optionally answer it from a simulated responder."""
    overrides: dict = {}
    if timeout_ms is not None:
        overrides["answer_timeout_ms"] = timeout_ms
    if sender is not None:
        overrides["sender_id"] = sender
    try:
        config = replace(get_config(), **overrides)
    except ValueError as err:
        handle_error(str(err))
    echo = Echo.from_config(config)

    try:
        asyncio.run(_run_question(echo, text, answer, after, late_answer))
    except QuestionTimeout as err:
        handle_error(str(err), code=2)
    finally:
        echo.close()
