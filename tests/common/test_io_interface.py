import pytest

from pazaak.common.io_interface import ConsoleIOInterface, TestIOInterface


def test_console_io_interface_methods(mocker, capsys):
    interface = ConsoleIOInterface()
    mocker.patch("builtins.input", side_effect=["s", "e"])

    interface.output("Test message")
    assert capsys.readouterr().out == "Test message\n"

    assert interface.input("Action: ") == "s"
    assert interface.input("Action: ") == "e"


def test_test_io_interface_methods():
    interface = TestIOInterface(["1"])

    interface.output("Test")
    assert interface.sent_messages == ["Test"]

    interface.add_input("s")
    assert interface.input("first? ") == "1"
    assert interface.input("second? ") == "s"
    assert interface.prompts == ["first? ", "second? "]

    # Queue exhausted
    with pytest.raises(EOFError):
        interface.input("third? ")
