"""Tests for the error taxonomy."""

from iaasctl.domain.core.exceptions import CommandFailedError, DomainException
from iaasctl.domain.machine.exceptions import MachineCleanupError, MachineCreationError, NameTakenError
from iaasctl.domain.provider.exceptions import DriverNotSetError, ProviderUnknownError


def test_error_codes():
    assert NameTakenError("dev-1").error_code == "NAME_TAKEN"
    assert DriverNotSetError("ec2").error_code == "DRIVER_NOT_SET"
    assert ProviderUnknownError("nope", ["dockermachine"]).details["available"] == ["dockermachine"]
    assert MachineCreationError("dev-1", "boom").error_code == "CREATE_FAILED"


def test_cleanup_error_keeps_both_causes():
    original = MachineCreationError("dev-1", "quota exceeded")
    cleanup = CommandFailedError(["docker-machine", "rm"], 1, "permission denied")
    error = MachineCleanupError("dev-1", original, cleanup)

    assert error.original is original
    assert error.cleanup_error is cleanup
    assert "quota exceeded" in str(error)
    assert "permission denied" in str(error)
    assert error.to_dict()["error"] == "CLEANUP_FAILED"


def test_to_dict_includes_cause():
    try:
        try:
            raise ValueError("low level")
        except ValueError as e:
            raise DomainException("high level") from e
    except DomainException as error:
        data = error.to_dict()
    assert data == {"error": "DOMAIN_ERROR", "message": "high level", "details": {}, "cause": "low level"}
