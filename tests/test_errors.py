from keychain_core.errors import (
    KeyChainError,
    NotSupportedError,
    InvalidDescriptorError,
    UnsupportedAlgorithmParameters,
)


def test_not_supported_algorithm_message():
    err = NotSupportedError("RS256")
    assert str(err) == "RS256 is not a supported algorithm"
    assert err.algorithm == "RS256"
    assert isinstance(err, KeyChainError)


def test_not_supported_operation_message():
    err = NotSupportedError(operation="invalidOp")
    assert str(err) == "Operation 'invalidOp' is not supported"
    assert err.algorithm is None


def test_algorithm_message_wins_when_both_given():
    err = NotSupportedError("HS256", operation="generateKey")
    assert str(err) == "HS256 is not a supported algorithm"
    assert err.operation == "generateKey"


def test_invalid_descriptor_message_and_path():
    err = InvalidDescriptorError("sig", 42, ("token", "sig"))
    assert str(err) == 'Invalid descriptor for key "sig": 42'
    assert err.key == "sig"
    assert err.value == 42
    assert err.path == ("token", "sig")


def test_invalid_descriptor_default_path():
    assert InvalidDescriptorError("sig", "x").path == ("sig",)


def test_unsupported_parameters_is_keychain_error():
    assert issubclass(UnsupportedAlgorithmParameters, KeyChainError)
