from fantasy_draft_ledger.exceptions import ConflictError


class DuplicateKeyError(ConflictError):
    def __init__(self, entity: str, key: str) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} already exists: {key}")


class StaleWriteError(ConflictError):
    def __init__(self, expected_version: int, actual_version: int) -> None:
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Draft state changed since it was read (expected version {expected_version}, found {actual_version})"
        )
