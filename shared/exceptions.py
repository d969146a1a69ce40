"""RFC 9457 Problem Details exception hierarchy.

All API errors extend ProblemDetailError and are converted to
application/problem+json responses by the exception handler middleware.
"""

PROBLEM_BASE_URI = "https://healthkit-seeder.dev/problems"


class ProblemDetailError(Exception):
    def __init__(
        self,
        type_uri: str,
        title: str,
        status: int,
        detail: str,
        violations: list[dict] | None = None,
    ):
        self.type_uri = type_uri
        self.title = title
        self.status = status
        self.detail = detail
        self.violations = violations
        super().__init__(detail)


class AuthorizationRequiredError(ProblemDetailError):
    def __init__(self, detail: str = "Request HealthKit access before generating data."):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/authorization-required",
            title="Authorization Required",
            status=403,
            detail=detail,
        )


class AuthorizationDeniedError(ProblemDetailError):
    def __init__(self, detail: str):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/authorization-denied",
            title="Authorization Denied",
            status=403,
            detail=detail,
        )


class HealthDataUnavailableError(ProblemDetailError):
    def __init__(self, detail: str):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/health-data-unavailable",
            title="Health Data Unavailable",
            status=503,
            detail=detail,
        )


class EmptyMockBatchError(ProblemDetailError):
    def __init__(self):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/empty-mock-batch",
            title="Empty Mock Batch",
            status=422,
            detail="No mock data could be created.",
        )


class InvalidMockBatchError(ProblemDetailError):
    def __init__(self, violations: list[dict]):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/invalid-mock-batch",
            title="Invalid Mock Batch",
            status=422,
            detail=f"Mock batch failed {len(violations)} validation rule(s); nothing was written",
            violations=violations,
        )


class MockDataWriteError(ProblemDetailError):
    def __init__(self, reason: str):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/mock-data-write-failed",
            title="Mock Data Write Failed",
            status=502,
            detail=reason,
        )
