from loghorizon.errs import AppError, ErrorType


def test_message_without_cause():
    error = AppError(ErrorType.VALIDATION, "bad input")
    assert str(error) == "bad input"
    assert error.err is None


def test_message_with_cause():
    cause = ValueError("level missing")
    error = AppError(ErrorType.INTERNAL, "bad input", cause)
    assert str(error) == "bad input: level missing"
    assert error.__cause__ is cause


def test_error_type_values():
    assert ErrorType.NOT_FOUND.value == "not_found"
    assert ErrorType("unauthorized") is ErrorType.UNAUTHORIZED


def test_keeps_type_and_message():
    error = AppError(ErrorType.NOT_FOUND, "missing")
    assert error.type is ErrorType.NOT_FOUND
    assert error.message == "missing"
    assert isinstance(error, Exception)