class PyGrowattError(Exception):
    pass


class MissingCredentials(PyGrowattError):
    def __init__(self, msg="no credentials", *args, **kwargs):
        super().__init__(msg, *args, **kwargs)


class AuthError(PyGrowattError):
    """
    Login failed for every generation tried.

    kind is "invalid-credentials" when the vendor answered and refused us,
    "upstream-unreachable" when no answer came back at all.
    """
    kind = "invalid-credentials"

    def __init__(self, msg="authentication failed", *args, **kwargs):
        super().__init__(msg, *args, **kwargs)


class AuthRejected(AuthError):
    kind = "invalid-credentials"

    def __init__(self, msg="authentication rejected by all login generations", *args, **kwargs):
        super().__init__(msg, *args, **kwargs)


class UpstreamUnreachable(AuthError):
    kind = "upstream-unreachable"

    def __init__(self, msg="upstream unreachable", *args, **kwargs):
        super().__init__(msg, *args, **kwargs)


class PlantListUnavailable(PyGrowattError):
    def __init__(self, msg="plant list unavailable", *args, **kwargs):
        super().__init__(msg, *args, **kwargs)
