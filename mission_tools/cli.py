"""Command line entry point to generate and check the tool catalog.

``generate-tool-catalog`` writes the catalog generated from the OpenAPI
document of the running API. ``check-tool-catalog`` regenerates it in memory,
validates it against the required field contract and reports drift with the
persisted one, failing on drift only with ``--fail-on-diff``.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Callable, NamedTuple, Sequence

from .catalog.contract import ContractValidator
from .catalog.generator import CatalogGenerator
from .client import fetch_openapi, load_openapi_file
from .exceptions import MissionToolsError
from .settings import Settings, configure_logging, get_settings
from .storage.catalog_store import CatalogStore, diff_catalogs, serialize_catalog

logger = logging.getLogger(__name__)

GENERATE_COMMAND = "generate-tool-catalog"
CHECK_COMMAND = "check-tool-catalog"

OpenApiLoader = Callable[[Path | None], dict[str, Any]]


class CommandResult(NamedTuple):
    handled: bool
    exit_code: int


NOT_HANDLED = CommandResult(handled=False, exit_code=0)
HANDLED_SUCCESS = CommandResult(handled=True, exit_code=0)
HANDLED_FAILURE = CommandResult(handled=True, exit_code=1)


def _build_parser(command: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=f"mission-tools {command}")
    parser.add_argument(
        "--openapi-file",
        type=Path,
        default=None,
        help="Read the OpenAPI document (JSON or YAML) from this file instead of the running API.",
    )
    if command == CHECK_COMMAND:
        parser.add_argument(
            "--fail-on-diff",
            action="store_true",
            help="Exit with 1 when the persisted catalog differs from the generated one.",
        )
    return parser


class CommandRunner:
    def __init__(
        self,
        settings: Settings,
        store: CatalogStore | None = None,
        openapi_loader: OpenApiLoader | None = None,
        generator: CatalogGenerator | None = None,
        contract_validator: ContractValidator | None = None,
    ) -> None:
        self.settings = settings
        self.contract_validator = contract_validator or ContractValidator()
        self.store = store or CatalogStore(
            settings.catalog_path, contract_validator=self.contract_validator
        )
        self.openapi_loader = openapi_loader or self._load_openapi
        self.generator = generator or CatalogGenerator()

    def _load_openapi(self, openapi_file: Path | None) -> dict[str, Any]:
        if openapi_file:
            return load_openapi_file(openapi_file)
        return fetch_openapi(self.settings)

    def try_execute(self, args: Sequence[str]) -> CommandResult:
        if not args:
            return NOT_HANDLED
        command = args[0].strip().lower()
        if command not in (GENERATE_COMMAND, CHECK_COMMAND):
            return NOT_HANDLED

        options = _build_parser(command).parse_args(list(args[1:]))
        if command == GENERATE_COMMAND:
            return self.generate(openapi_file=options.openapi_file)
        return self.check(
            openapi_file=options.openapi_file, fail_on_diff=options.fail_on_diff
        )

    def generate(self, openapi_file: Path | None = None) -> CommandResult:
        catalog = self.generator.generate(self.openapi_loader(openapi_file))
        self.store.write(catalog)
        logger.info(f"Tool catalog generated at {self.store.path}")
        return HANDLED_SUCCESS

    def check(
        self, openapi_file: Path | None = None, fail_on_diff: bool = False
    ) -> CommandResult:
        catalog = self.generator.generate(self.openapi_loader(openapi_file))
        errors = self.contract_validator.validate_required_fields(catalog.tools)
        for error in errors:
            logger.error(error)

        diff = diff_catalogs(serialize_catalog(catalog), self.store.try_read_raw())
        if diff.identical:
            logger.info("Tool catalog is up to date")
        else:
            logger.warning(
                f"Tool catalog at {self.store.path} differs from the generated one, "
                f"run '{GENERATE_COMMAND}' to update it:\n{diff.details}"
            )

        if errors:
            logger.error(
                f"Generated tool catalog violates the required field contract ({len(errors)} errors)"
            )
            return HANDLED_FAILURE
        if fail_on_diff and not diff.identical:
            return HANDLED_FAILURE
        return HANDLED_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    settings = get_settings()
    configure_logging(settings)

    try:
        result = CommandRunner(settings=settings).try_execute(argv)
    except MissionToolsError as error:
        logger.error(str(error))
        return 1

    if not result.handled:
        logger.warning(
            f"Nothing to do, known commands are: {GENERATE_COMMAND}, {CHECK_COMMAND}"
        )
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
