"""Command-line interface for the Aspirant Network client."""

import secrets
from typing import Optional

import typer
from typing_extensions import Annotated

from aspirant_network.api import AspirantAPI, AspirantAPIClient, APIError
from aspirant_network.config import get_settings
from aspirant_network.errors import AuthError, ExamSelectionError
from aspirant_network.session import AuthSession, ExamSession
from aspirant_network.storage import JsonFileStore
from aspirant_network.utils.logging import get_logger, setup_logging

logger = get_logger("cli")

app = typer.Typer(help="Aspirant Network - exam preparation community client")

SECRET_BYTES = 64
RULE = "━" * 130


def build_session() -> AuthSession:
    """Hydrate the auth session from the configured session file."""
    settings = get_settings()
    auth = AuthSession(JsonFileStore(settings.storage_path))
    auth.hydrate()
    return auth


def build_api(auth: Optional[AuthSession] = None) -> AspirantAPI:
    settings = get_settings()
    client = AspirantAPIClient(
        base_url=settings.api_base_url,
        timeout=settings.api_timeout,
        auth_header=auth.get_auth_header if auth is not None else None,
    )
    return AspirantAPI(client)


@app.callback()
def main(
    loglevel: Annotated[Optional[str], typer.Option("--loglevel", "-l", help="Logging level")] = None,
) -> None:
    setup_logging(loglevel)


@app.command("generate-secret")
def generate_secret() -> None:
    """Print a random 64-byte hex secret for signing JWTs."""
    jwt_secret = secrets.token_hex(SECRET_BYTES)

    typer.echo("\n🔐 Generating Secure JWT Secret...\n")
    typer.echo("Your JWT Secret (copy this to .env file):")
    typer.echo(RULE)
    typer.echo(jwt_secret)
    typer.echo(RULE)
    typer.echo("\n📝 Update your .env file:")
    typer.echo(f"JWT_SECRET={jwt_secret}")
    typer.echo("\n✅ Keep this secret safe! Never commit it to git.\n")


@app.command()
def login(
    email: Annotated[str, typer.Option("--email", "-e", help="Account email")],
    password: Annotated[str, typer.Option("--password", "-p", prompt=True, hide_input=True, help="Account password")],
) -> None:
    """Sign in and store the session locally."""
    auth = build_session()
    api = build_api()
    try:
        response = api.auth.login(email, password)
        auth.login(response.get("user") or {}, response.get("token") or "")
    except (APIError, AuthError) as e:
        logger.error(f"Login failed: {e.message}")
        typer.echo(f"Login failed: {e.message}", err=True)
        raise typer.Exit(code=1)

    exam = ExamSession(auth)
    typer.echo(f"Logged in as {auth.user.username} (current exam: {exam.current_exam})")


@app.command()
def logout() -> None:
    """Clear the locally stored session."""
    auth = build_session()
    if auth.is_authenticated():
        try:
            build_api(auth).auth.logout()
        except APIError as e:
            logger.warning(f"Server logout failed, clearing local session anyway: {e.message}")
    auth.logout()
    typer.echo("Logged out")


@app.command()
def status() -> None:
    """Show who is signed in and which exam is active."""
    auth = build_session()
    if not auth.is_authenticated():
        typer.echo("Not logged in")
        raise typer.Exit(code=1)

    exam = ExamSession(auth)
    user = auth.user
    typer.echo(f"User: {user.name} (@{user.username})")
    typer.echo(f"Current exam: {exam.current_exam}")
    typer.echo(f"Available exams: {', '.join(exam.get_available_exams())}")


@app.command("switch-exam")
def switch_exam(
    exam: Annotated[str, typer.Argument(help="Primary or secondary exam to switch to")],
) -> None:
    """Switch the active exam between the primary and secondary one."""
    auth = build_session()
    exam_session = ExamSession(auth)
    try:
        exam_session.switch_exam(exam)
    except ExamSelectionError as e:
        typer.echo(e.message, err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Current exam: {exam_session.current_exam}")


if __name__ == "__main__":
    app()
