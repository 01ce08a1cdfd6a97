import difflib
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..catalog.contract import ContractValidator
from ..exceptions import CatalogContractError, CatalogNotFoundError, InvalidCatalogError
from ..models.catalog import Catalog, CatalogDiff, ToolDefinition

logger = logging.getLogger(__name__)


def _dump(data: Any) -> str:
    # for the end-of-file check, the catalog is committed to git
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def serialize_catalog(catalog: Catalog) -> str:
    return _dump(catalog.to_json())


def normalize_json(raw: str) -> str:
    """Re-serialize ``raw`` the way catalogs are written, for textual comparison."""
    try:
        return _dump(json.loads(raw))
    except json.JSONDecodeError as error:
        raise InvalidCatalogError(f"catalog is not valid JSON: {error}") from error


def parse_tools_from_catalog_json(raw: str | None) -> list[ToolDefinition]:
    """Best-effort parse, anything unreadable is skipped instead of raising."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as error:
        logger.warning(f"Ignoring malformed catalog JSON: {error}")
        return []
    if not isinstance(data, dict) or not isinstance(data.get("tools"), list):
        logger.warning("Ignoring catalog JSON without a 'tools' list")
        return []

    tools: list[ToolDefinition] = []
    seen: set[str] = set()
    for entry in data["tools"]:
        try:
            tool = ToolDefinition.model_validate(entry)
        except ValidationError as error:
            logger.warning(f"Skipping invalid tool entry: {error}")
            continue
        if tool.name in seen:
            logger.warning(f"Skipping duplicated tool entry: {tool.name}")
            continue
        seen.add(tool.name)
        tools.append(tool)

    return tools


def parse_catalog_or_raise(raw: str, source: str = "catalog") -> Catalog:
    try:
        catalog = Catalog.model_validate_json(raw)
    except ValidationError as error:
        raise InvalidCatalogError(f"{source} is invalid: {error}") from error
    if not catalog.tools:
        raise InvalidCatalogError(f"{source} is empty, it has no tools")
    return catalog


def diff_catalogs(expected: str, current: str | None) -> CatalogDiff:
    """Compare the freshly generated catalog with the persisted one."""
    expected = normalize_json(expected)
    if current is None:
        current = ""
    else:
        try:
            current = normalize_json(current)
        except InvalidCatalogError:
            logger.debug("Persisted catalog is not valid JSON, comparing it as text")

    if expected == current:
        return CatalogDiff(identical=True)

    details = "".join(
        difflib.unified_diff(
            current.splitlines(keepends=True),
            expected.splitlines(keepends=True),
            fromfile="persisted",
            tofile="generated",
        )
    )
    return CatalogDiff(identical=False, details=details)


class CatalogStore:
    def __init__(
        self, path: Path, contract_validator: ContractValidator | None = None
    ) -> None:
        self.path = Path(path)
        self.contract_validator = contract_validator or ContractValidator()

    def write(self, catalog: Catalog) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(serialize_catalog(catalog), encoding="utf-8", newline="\n")
        logger.info(f"Wrote {len(catalog.tools)} tools to {self.path}")

    def try_read_raw(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info(f"No catalog found at {self.path}")
            return None
        except OSError as error:
            logger.warning(f"Unable to read catalog at {self.path}: {error}")
            return None

    def load_tools_or_empty(self) -> list[ToolDefinition]:
        return parse_tools_from_catalog_json(self.try_read_raw())

    def load_tools_or_raise(self) -> list[ToolDefinition]:
        """Strict load used at startup, the tools must satisfy the contract."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as error:
            raise CatalogNotFoundError(f"catalog not found at '{self.path}'") from error
        except OSError as error:
            raise InvalidCatalogError(
                f"unable to read catalog at '{self.path}': {error}"
            ) from error

        catalog = parse_catalog_or_raise(raw, source=f"catalog at '{self.path}'")
        errors = self.contract_validator.validate_required_fields(catalog.tools)
        if errors:
            raise CatalogContractError(errors)

        logger.info(f"Loaded {len(catalog.tools)} tools from {self.path}")
        return list(catalog.tools)
