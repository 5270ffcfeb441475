# test/test_runner.py
import socket
import textwrap

import pytest

from netblocker import blocker
from netblocker.config import GuardConfig
from netblocker.runner import resolve_target, run


def test_resolve_module_attr():
    assert resolve_target("module:attr") == ("module", "attr")


def test_resolve_console_script(mocker):
    mocker.patch("netblocker.runner.find_console_entrypoint", return_value=("pkg.cli", "main"))
    assert resolve_target("pkg-cli") == ("pkg.cli", "main")


def test_resolve_module_fallback(mocker):
    mocker.patch("netblocker.runner.find_console_entrypoint", return_value=None)
    assert resolve_target("mymodule") == ("mymodule", "__main__")


def test_run_inprocess(mocker):
    invoke = mocker.patch("netblocker.runner.invoke_entry", return_value=7)
    assert run("mymodule:main", ["--arg"], GuardConfig()) == 7
    invoke.assert_called_once_with("mymodule", "main", ["mymodule:main", "--arg"])
    assert blocker.current() is None


def test_run_guard_active_during_target(mocker):
    seen = {}

    def fake_invoke(module_name, attr, argv):
        seen["gateway"] = blocker.current()
        seen["wrapped"] = hasattr(socket.getaddrinfo, "__wrapped__")

    mocker.patch("netblocker.runner.invoke_entry", side_effect=fake_invoke)
    assert run("mymodule:main", [], GuardConfig()) == 0
    assert seen["gateway"].active is True
    assert seen["wrapped"] is True
    assert not hasattr(socket.getaddrinfo, "__wrapped__")


def test_run_tears_down_when_target_raises(mocker):
    mocker.patch("netblocker.runner.invoke_entry", side_effect=RuntimeError("boom"))
    with pytest.raises(RuntimeError, match="boom"):
        run("mymodule:main", [], GuardConfig())
    assert blocker.current() is None
    assert not hasattr(socket.getaddrinfo, "__wrapped__")


def test_run_module_as_main(tmp_path, monkeypatch):
    (tmp_path / "nb_runner_script.py").write_text(
        textwrap.dedent(
            """
            import socket

            if __name__ == "__main__":
                socket.getaddrinfo("example.com", 443)
            """
        )
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    assert run("nb_runner_script:__main__", [], GuardConfig()) == 2
