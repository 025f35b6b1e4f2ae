"""CLI adapter for ``lib_env_struct`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators check how the current environment populates a dataclass, and
try the built-in parsers, without writing Python code.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_env_prefix` – helper exposing :func:`lib_env_struct.default_env_prefix`.
* :func:`cli_load` – imports ``module:Class``, populates it from the process
  environment, and prints JSON.
* :func:`cli_parse_value` – runs the built-in parser for a named type.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer and only calls the composition root.
``lib_cli_exit_tools`` centralises the exit code strategy so all commands
behave consistently across shells and CI.
"""

from __future__ import annotations

import dataclasses
import enum
import json
import sys
from importlib import import_module, metadata
from typing import Any, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import default_env_prefix as _default_env_prefix
from .core import load, parse_value
from .domain.schema import F32, F64, I8, I16, I32, I64, I128, U8, U16, U32, U64, U128

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

PARSE_TYPES: Final[dict[str, Any]] = {
    "str": str,
    "bool": bool,
    "int": int,
    "i8": I8,
    "i16": I16,
    "i32": I32,
    "i64": I64,
    "i128": I128,
    "u8": U8,
    "u16": U16,
    "u32": U32,
    "u64": U64,
    "u128": U128,
    "float": float,
    "f32": F32,
    "f64": F64,
}


def _resolve_version() -> str:
    """Return the installed package version with sensible fallbacks.

    Returns
    -------
    str
        Distribution version if available, otherwise ``"0.0.0"``.
    """

    try:
        return metadata.version("lib_env_struct")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Populate typed dataclasses from environment variables",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_env_struct",
    message="lib_env_struct version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_env_struct")
    except metadata.PackageNotFoundError:
        click.echo("lib_env_struct (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_env_struct')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("env-prefix", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("slug")
def cli_env_prefix(slug: str) -> None:
    """Compute the canonical environment prefix for *slug*.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> runner = CliRunner()
    >>> result = runner.invoke(cli, ["env-prefix", "billing-api"])
    >>> result.output.strip()
    'BILLING_API'
    """

    click.echo(_default_env_prefix(slug))


@cli.command("load", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("target")
@click.option("--prefix", default=None, help="Prefix prepended to every environment key")
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
def cli_load(target: str, prefix: Optional[str], indent: Optional[int]) -> None:
    """Populate TARGET (``package.module:ClassName``) from the environment and print JSON.

    Failures such as missing required fields exit non-zero with the error
    message; pass ``--traceback`` for the full stack.
    """

    schema_type = _import_target(target)
    instance = load(schema_type, prefix=prefix)
    click.echo(json.dumps(_to_jsonable(instance), indent=indent, separators=(",", ":"), ensure_ascii=False))


@cli.command("parse-value", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("type_name", metavar="TYPE", type=click.Choice(tuple(PARSE_TYPES), case_sensitive=False))
@click.argument("raw")
def cli_parse_value(type_name: str, raw: str) -> None:
    """Parse RAW with the built-in parser for TYPE and print the result as JSON."""

    value = parse_value(PARSE_TYPES[type_name.lower()], raw)
    click.echo(json.dumps(value))


def _import_target(target: str) -> type:
    """Resolve ``module:qualname`` into a dataclass type."""

    module_name, sep, qualname = target.partition(":")
    if not sep or not module_name or not qualname:
        raise click.BadParameter("Target must look like 'package.module:ClassName'.", param_hint="TARGET")
    try:
        obj: Any = import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(f"Cannot import module {module_name!r}: {exc}", param_hint="TARGET") from exc
    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise click.BadParameter(f"{module_name!r} has no attribute {qualname!r}", param_hint="TARGET") from exc
    if not (isinstance(obj, type) and dataclasses.is_dataclass(obj)):
        raise click.BadParameter(f"{target!r} is not a dataclass", param_hint="TARGET")
    return obj


def _to_jsonable(value: Any) -> Any:
    """Convert populated instances into JSON-compatible data (enums become names)."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {item.name: _to_jsonable(getattr(value, item.name)) for item in dataclasses.fields(value)}
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, dict):
        return {str(key): _to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_jsonable(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_env_struct",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
