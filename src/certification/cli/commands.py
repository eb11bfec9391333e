"""CLI commands for the certification system.

Each command loads the platform state from $CERTIFY_DATA_DIR (default
./data), runs one operation as the address given with --as, and saves the
state only if the operation succeeded.
"""

from contextlib import contextmanager
from typing import Generator

import typer
from rich.console import Console
from rich.table import Table

from certification.config.app_config import load_app_config
from certification.core.errors import CertificationError
from certification.core.platform import CertificationPlatform
from certification.core.roles import Role
from certification.store.state_repository import (
    get_data_dir,
    load_platform,
    save_platform,
    state_exists,
    state_path,
)
from certification.utils.validators import check_amount, parse_money

app = typer.Typer(
    name="certify",
    help="Course places, evaluations and certificates.",
    no_args_is_help=True,
)

console = Console()

CALLER_OPTION = typer.Option(..., "--as", help="Dirección que ejecuta la operación")


@contextmanager
def _open_platform(save: bool = True) -> Generator[CertificationPlatform, None, None]:
    """Load platform state, yield it, and save it if no error occurred."""
    data_dir = get_data_dir()
    if not state_exists(data_dir):
        console.print(f"[red]✗ Estado no encontrado: {state_path(data_dir)}[/red]")
        console.print("  Ejecuta primero: certify init --admin <dirección>")
        raise typer.Exit(code=1)

    platform = load_platform(data_dir)
    try:
        yield platform
    except CertificationError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)
    if save:
        save_platform(platform, data_dir)


# =============================================================================
# SETUP AND ROLES
# =============================================================================


@app.command()
def init(
    admin: str = typer.Option(..., "--admin", "-a", help="Dirección del administrador inicial"),
    force: bool = typer.Option(False, "--force", "-f", help="Sobrescribir estado existente"),
) -> None:
    """Create an empty platform state with one admin."""
    data_dir = get_data_dir()
    if state_exists(data_dir) and not force:
        console.print(f"[yellow]⚠ Ya existe un estado en {state_path(data_dir)}[/yellow]")
        console.print("  Usa --force para reiniciarlo")
        raise typer.Exit(code=1)

    try:
        platform = CertificationPlatform.from_config(load_app_config(), admins=[admin])
    except CertificationError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    path = save_platform(platform, data_dir)
    console.print("[green]✓ Plataforma inicializada[/green]")
    console.print(f"  [dim]admin:[/dim] {admin.lower()}")
    console.print(f"  [dim]state:[/dim] {path}")


@app.command(name="grant-role")
def grant_role(
    role: Role = typer.Argument(..., help="admin | evaluator"),
    account: str = typer.Argument(..., help="Dirección que recibe el rol"),
    caller: str = CALLER_OPTION,
) -> None:
    """Grant a role to an account."""
    with _open_platform() as platform:
        added = platform.grant_role(caller, role, account)
    if added:
        console.print(f"[green]✓ Rol {role.value} concedido a {account.lower()}[/green]")
    else:
        console.print(f"[yellow]⚠ {account.lower()} ya tenía el rol {role.value}[/yellow]")


@app.command(name="revoke-role")
def revoke_role(
    role: Role = typer.Argument(..., help="admin | evaluator"),
    account: str = typer.Argument(..., help="Dirección que pierde el rol"),
    caller: str = CALLER_OPTION,
) -> None:
    """Revoke a role from an account."""
    with _open_platform() as platform:
        removed = platform.revoke_role(caller, role, account)
    if removed:
        console.print(f"[green]✓ Rol {role.value} revocado a {account.lower()}[/green]")
    else:
        console.print(f"[yellow]⚠ {account.lower()} no tenía el rol {role.value}[/yellow]")


# =============================================================================
# COURSES
# =============================================================================


@app.command(name="create-course")
def create_course(
    course_id: int = typer.Argument(..., help="Identificador del curso"),
    places: int = typer.Argument(..., help="Plazas iniciales"),
    uri: str = typer.Option("", "--uri", "-u", help="URI de metadatos del curso"),
    fee: str | None = typer.Option(None, "--fee", help="Precio por plaza (por defecto: base_course_fee)"),
    caller: str = CALLER_OPTION,
) -> None:
    """Create a course, or add places to an existing one."""
    with _open_platform() as platform:
        course = platform.create_course(caller, course_id, places, uri, fee)
    console.print(f"[green]✓ Curso {course_id} registrado[/green]")
    console.print(f"  [dim]plazas:[/dim] {course.total_places}")
    console.print(f"  [dim]precio:[/dim] {course.fee_per_place}")
    if course.metadata_uri:
        console.print(f"  [dim]uri:[/dim]    {course.metadata_uri}")


@app.command(name="remove-places")
def remove_places(
    course_id: int = typer.Argument(..., help="Identificador del curso"),
    qty: int = typer.Argument(..., help="Plazas a retirar"),
    holder: str = typer.Option(..., "--holder", help="Dirección de la que se queman las unidades"),
    caller: str = CALLER_OPTION,
) -> None:
    """Remove places from a course, burning units from holder."""
    with _open_platform() as platform:
        course = platform.remove_places(caller, holder, course_id, qty)
    console.print(f"[green]✓ {qty} plazas retiradas del curso {course_id}[/green]")
    console.print(f"  [dim]plazas:[/dim] {course.total_places}")


@app.command(name="set-uri")
def set_uri(
    course_id: int = typer.Argument(..., help="Identificador del curso"),
    uri: str = typer.Argument(..., help="Nueva URI de metadatos"),
    caller: str = CALLER_OPTION,
) -> None:
    """Change a course's metadata URI."""
    with _open_platform() as platform:
        platform.set_course_uri(caller, course_id, uri)
    console.print(f"[green]✓ URI del curso {course_id} actualizada[/green]")


@app.command(name="add-evaluator")
def add_evaluator(
    course_id: int = typer.Argument(..., help="Identificador del curso"),
    evaluator: str = typer.Argument(..., help="Dirección del evaluador"),
    caller: str = CALLER_OPTION,
) -> None:
    """Assign an evaluator to a course."""
    with _open_platform() as platform:
        platform.set_up_evaluator(caller, evaluator, course_id)
        count = len(platform.get_evaluators(course_id))
    console.print(f"[green]✓ Evaluador {evaluator.lower()} asignado al curso {course_id}[/green]")
    console.print(f"  [dim]evaluadores:[/dim] {count}")


@app.command(name="remove-evaluator")
def remove_evaluator(
    course_id: int = typer.Argument(..., help="Identificador del curso"),
    evaluator: str = typer.Argument(..., help="Dirección del evaluador"),
    caller: str = CALLER_OPTION,
) -> None:
    """Remove an evaluator from a course."""
    with _open_platform() as platform:
        platform.remove_evaluator(caller, evaluator, course_id)
    console.print(f"[green]✓ Evaluador {evaluator.lower()} retirado del curso {course_id}[/green]")


@app.command(name="set-limits")
def set_limits(
    max_evaluators: int | None = typer.Option(None, "--max-evaluators", help="Máximo de evaluadores por curso"),
    max_places: int | None = typer.Option(None, "--max-places", help="Máximo de plazas por curso"),
    base_fee: str | None = typer.Option(None, "--base-fee", help="Precio base orientativo"),
    caller: str = CALLER_OPTION,
) -> None:
    """Change the per-course quotas."""
    if max_evaluators is None and max_places is None and base_fee is None:
        console.print("[yellow]⚠ Nada que cambiar[/yellow]")
        raise typer.Exit(code=1)

    with _open_platform() as platform:
        if max_evaluators is not None:
            platform.set_max_evaluators_per_course(caller, max_evaluators)
        if max_places is not None:
            platform.set_max_places_per_course(caller, max_places)
        if base_fee is not None:
            platform.set_base_course_fee(caller, base_fee)
        limits = platform.limits
    console.print("[green]✓ Límites actualizados[/green]")
    console.print(f"  [dim]max_evaluators:[/dim] {limits.max_evaluators_per_course}")
    console.print(f"  [dim]max_places:[/dim]     {limits.max_places_per_course}")
    console.print(f"  [dim]base_fee:[/dim]       {limits.base_course_fee}")


@app.command()
def course(
    course_id: int = typer.Argument(..., help="Identificador del curso"),
) -> None:
    """Show a course with its evaluators, students and marks."""
    with _open_platform(save=False) as platform:
        record = platform.get_course(course_id)
        evaluations = platform.get_evaluations(course_id)
        balances = {s: platform.balance_of(s, course_id) for s in record.students}

    console.print(f"[bold]Curso {record.course_id}[/bold]")
    console.print(f"  [dim]creador:[/dim]   {record.creator}")
    console.print(f"  [dim]precio:[/dim]    {record.fee_per_place}")
    console.print(f"  [dim]plazas:[/dim]    {record.places_purchased}/{record.total_places}")
    console.print(f"  [dim]aprobados:[/dim] {record.passed_count}")
    console.print(f"  [dim]uri:[/dim]       {record.metadata_uri or '-'}")
    console.print(f"  [dim]evaluadores:[/dim] {', '.join(record.evaluators) or '-'}")

    marks = {e.student: e.mark for e in evaluations}
    table = Table(title="Estudiantes")
    table.add_column("Dirección")
    table.add_column("Unidades", justify="right")
    table.add_column("Nota", justify="right")
    for student in record.students:
        mark = marks.get(student)
        table.add_row(student, str(balances[student]), "-" if mark is None else str(mark))
    console.print(table)


# =============================================================================
# ENROLLMENT AND EVALUATION
# =============================================================================


@app.command(name="buy-place")
def buy_place(
    course_id: int = typer.Argument(..., help="Identificador del curso"),
    value: str = typer.Option(..., "--value", "-v", help="Importe pagado"),
    caller: str = CALLER_OPTION,
) -> None:
    """Buy a place in a course."""
    with _open_platform() as platform:
        platform.buy_place(caller, course_id, value)
    console.print(f"[green]✓ Plaza comprada en el curso {course_id}[/green]")
    console.print(f"  [dim]estudiante:[/dim] {caller.lower()}")


@app.command(name="transfer-place")
def transfer_place(
    course_id: int = typer.Argument(..., help="Identificador del curso"),
    student: str = typer.Argument(..., help="Estudiante que recibe la unidad"),
    caller: str = CALLER_OPTION,
) -> None:
    """Hand the course unit to an enrolled student."""
    with _open_platform() as platform:
        platform.transfer_place_nft(caller, student, course_id)
    console.print(f"[green]✓ Unidad del curso {course_id} transferida a {student.lower()}[/green]")


@app.command()
def evaluate(
    course_id: int = typer.Argument(..., help="Identificador del curso"),
    student: str = typer.Argument(..., help="Estudiante evaluado"),
    mark: int = typer.Argument(..., help="Nota de 1 a 10"),
    caller: str = CALLER_OPTION,
) -> None:
    """Record a student's mark."""
    with _open_platform() as platform:
        record = platform.evaluate(caller, course_id, student, mark)
    status = "[green]aprobado[/green]" if record.passed else "[yellow]suspendido[/yellow]"
    console.print(f"[green]✓ Nota {record.mark} registrada[/green] ({status})")
    console.print(f"  [dim]estudiante:[/dim] {record.student}")
    console.print(f"  [dim]fecha:[/dim]      {record.timestamp}")


@app.command(name="make-certificates")
def make_certificates(
    course_id: int = typer.Argument(..., help="Identificador del curso"),
    uri: str = typer.Option(..., "--uri", "-u", help="URI de metadatos del certificado"),
    caller: str = CALLER_OPTION,
) -> None:
    """Finalize a course: burn unsold and failed units, certify the rest."""
    with _open_platform() as platform:
        report = platform.make_certificates(caller, course_id, uri)
    console.print(f"[green]✓ Curso {course_id} finalizado[/green]")
    console.print(f"  [dim]plazas no vendidas quemadas:[/dim] {report.unsold_burned}")
    console.print(f"  [dim]certificados:[/dim] {len(report.certified)}")
    console.print(f"  [dim]revocados:[/dim]    {len(report.revoked)}")
    console.print(f"  [dim]uri:[/dim]          {report.uri or '-'}")


# =============================================================================
# TREASURY
# =============================================================================


@app.command()
def withdraw(
    amount: str = typer.Argument(..., help="Importe a retirar"),
    caller: str = CALLER_OPTION,
) -> None:
    """Withdraw custodied fees to the calling admin."""
    with _open_platform() as platform:
        remaining = platform.withdraw(caller, amount)
    console.print(f"[green]✓ Retirado {parse_money('amount', amount)}[/green]")
    console.print(f"  [dim]saldo restante:[/dim] {remaining}")


@app.command()
def balance(
    owner: str | None = typer.Option(None, "--owner", help="Mostrar unidades de esta dirección"),
    course_id: int | None = typer.Option(None, "--course", "-c", help="Curso de las unidades"),
) -> None:
    """Show the treasury balance, or the units held by --owner in --course."""
    if (owner is None) != (course_id is None):
        console.print("[red]✗ --owner y --course van juntos[/red]")
        raise typer.Exit(code=1)

    with _open_platform(save=False) as platform:
        if owner is None:
            console.print(f"Saldo del tesoro: {platform.balance()}")
        else:
            check_amount("course_id", course_id)
            units = platform.balance_of(owner, course_id)
            console.print(f"{owner.lower()} tiene {units} unidad(es) del curso {course_id}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
