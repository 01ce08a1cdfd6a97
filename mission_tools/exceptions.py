class MissionToolsError(Exception):
    pass


class ResolutionError(MissionToolsError):
    """The OpenAPI document could not be turned into tool schemas."""

    def __init__(self, message: str, pointer: str = "", operation: str = "") -> None:
        self.pointer = pointer
        self.operation = operation
        details = message
        if pointer:
            details += f" (pointer: {pointer})"
        if operation:
            details += f" (operation: {operation})"
        super().__init__(details)


class OpenApiFetchError(MissionToolsError):
    pass


class CatalogNotFoundError(MissionToolsError):
    pass


class InvalidCatalogError(MissionToolsError):
    pass


class CatalogContractError(MissionToolsError):
    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(
            "tool catalog does not satisfy the required field contract: "
            + " ".join(errors)
        )


class ToolArgumentError(MissionToolsError):
    def __init__(self, tool_name: str, path: str, message: str) -> None:
        self.tool_name = tool_name
        self.path = path
        super().__init__(f"invalid arguments for tool '{tool_name}': {message}")


class UnknownToolError(MissionToolsError):
    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"tool not found: {tool_name}")


class DomainActionError(MissionToolsError):
    def __init__(self, message: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(message)
