"""Custom exceptions for Gridmind"""


class GridmindError(Exception):
    """Base exception for all Gridmind errors"""
    pass


class AddressParseError(GridmindError):
    """Malformed cell address"""
    def __init__(self, address: str):
        super().__init__(f"Invalid cell address: {address!r}")
        self.address = address


class FormulaEvaluationError(GridmindError):
    """Error evaluating a substituted arithmetic expression"""
    def __init__(self, message: str, expression: str = None, position: int = None):
        super().__init__(message)
        self.expression = expression
        self.position = position


class LLMError(GridmindError):
    """Error in LLM communication"""
    def __init__(self, message: str, provider: str = None, retries: int = 0):
        super().__init__(message)
        self.provider = provider
        self.retries = retries


class AIResponseParseError(GridmindError):
    """Model output does not match the expected structured shape"""
    def __init__(self, message: str, response: str = None):
        super().__init__(message)
        self.response = response


class AuthError(GridmindError):
    """Authentication error"""
    pass
