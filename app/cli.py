"""Benefit form compiler commands.

Commands:
    benefit-form compile <rules>        Compile rules (+ fields, wallet) into a form schema
    benefit-form catalog <catalog>      Compile the form for a catalog response
    benefit-form reclassify <form-data> <schema>   Build the submission payload
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import typer

from app.benefits.compiler import compile_application_form, compile_from_catalog
from app.benefits.exceptions import BenefitFormError
from app.benefits.submission import build_submission_payload, reclassify
from app.benefits.validation import build_missing_document_errors
from app.logging_config import JsonFormatter

EXIT_PARSE_ERROR = 2
EXIT_SUBMISSION_FAILURE = 3

app = typer.Typer(
    name="benefit-form",
    help="Compile benefit application forms and reclassify submissions.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log compilation details to stderr"),
) -> None:
    """Compile benefit application forms and reclassify submissions."""
    if verbose:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
        app_log = logging.getLogger("app")
        app_log.handlers = [handler]
        app_log.setLevel(logging.DEBUG)
        app_log.propagate = False
    else:
        # Warnings are already part of the JSON output
        logging.getLogger("app").setLevel(logging.ERROR)


def read_json(source: str) -> Any:
    """Read JSON from a file path, or from stdin when source is '-'."""
    try:
        if source == "-":
            return json.load(sys.stdin)
        return json.loads(Path(source).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        typer.echo(f"error: cannot read JSON from {source}: {e}", err=True)
        raise typer.Exit(code=EXIT_PARSE_ERROR)


def _read_optional(source: Optional[str]) -> Any:
    return read_json(source) if source else None


def _echo(data: Any, compact: bool) -> None:
    if compact:
        typer.echo(json.dumps(data, separators=(",", ":"), ensure_ascii=False))
    else:
        typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _final_output(final) -> dict:
    return {
        **final.to_dict(),
        "documentFieldNames": final.document_field_names,
        "missingDocuments": final.missing_documents,
        "extraErrors": build_missing_document_errors(final),
        "warnings": [w.to_dict() for w in final.warnings],
    }


@app.command("compile")
def compile_cmd(
    rules: str = typer.Argument(..., help="Rule feed JSON file, or '-' for stdin"),
    fields: Optional[str] = typer.Option(None, "--fields", help="Application fields JSON file"),
    wallet: Optional[str] = typer.Option(None, "--wallet", help="Document wallet JSON file"),
    title: str = typer.Option("", "--title", help="Root schema title"),
    compact: bool = typer.Option(False, "--compact", help="Print single-line JSON"),
) -> None:
    """Compile a rule feed into a form schema and uiSchema."""
    final = compile_application_form(
        _read_optional(fields) or [],
        read_json(rules),
        _read_optional(wallet) or [],
        title=title,
    )
    _echo(_final_output(final), compact)


@app.command("catalog")
def catalog_cmd(
    catalog: str = typer.Argument(..., help="Catalog response JSON file, or '-' for stdin"),
    prefill: Optional[str] = typer.Option(None, "--prefill", help="Pre-fill payload JSON file"),
    compact: bool = typer.Option(False, "--compact", help="Print single-line JSON"),
) -> None:
    """Compile the form for a catalog response."""
    try:
        compiled = compile_from_catalog(read_json(catalog), _read_optional(prefill))
    except BenefitFormError as e:
        typer.echo(f"error: {e.code}: {e.message}", err=True)
        raise typer.Exit(code=EXIT_PARSE_ERROR)

    output = _final_output(compiled.final)
    output["formData"] = compiled.form_data
    output["remark"] = compiled.remark
    _echo(output, compact)


@app.command("reclassify")
def reclassify_cmd(
    form_data: str = typer.Argument(..., help="Filled form values JSON file"),
    schema: str = typer.Argument(..., help="Compiled schema JSON file (schema or its properties)"),
    benefit_id: str = typer.Option(..., "--benefit-id", help="Benefit identifier"),
    wallet: Optional[str] = typer.Option(None, "--wallet", help="Document wallet JSON file"),
    compact: bool = typer.Option(False, "--compact", help="Print single-line JSON"),
) -> None:
    """Reclassify filled values into the submission payload."""
    schema_data = read_json(schema)
    if isinstance(schema_data, dict) and isinstance(schema_data.get("schema"), dict):
        schema_data = schema_data["schema"]

    try:
        result = reclassify(read_json(form_data), schema_data, _read_optional(wallet) or [])
    except BenefitFormError as e:
        typer.echo(f"error: {e.code}: {e.message}", err=True)
        raise typer.Exit(code=EXIT_SUBMISSION_FAILURE)

    _echo(build_submission_payload(result, benefit_id), compact)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
