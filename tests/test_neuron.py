"""Tests for neuron definitions and the runner, using real shell scripts."""

import io

import pytest
import yaml
from conftest import write_neuron

from cortex.core.errors import NeuronLaunchError, NeuronLoadError, NeuronNotFoundError
from cortex.neuron import Neuron, NeuronRunner, resolve_neuron_path


def test_load_definition(synapse_dir):
    path = write_neuron(
        synapse_dir,
        "check_web_proxy",
        "exit 0",
        type="check",
        description="Checks the proxy",
        pre_exec_debug="Going to check the proxy",
        assertExitStatus=[0, 137],
        post_exec_success_debug="All good",
        post_exec_fail_debug={120: "maxconn too low"},
    )

    neuron = Neuron.load(path)

    assert neuron.name == "check_web_proxy"
    assert neuron.type == "check"
    assert neuron.assert_exit_status == (0, 137)
    assert neuron.post_exec_fail_debug == {120: "maxconn too low"}
    assert neuron.is_accepted(137)
    assert not neuron.is_accepted(1)
    assert neuron.executable() == str(synapse_dir / "neurons" / "check_web_proxy.sh")


def test_snake_case_exit_status_key(tmp_path):
    path = tmp_path / "n.yml"
    path.write_text(yaml.safe_dump({"name": "n", "exec_file": "true", "assert_exit_status": [3]}))
    assert Neuron.load(path).assert_exit_status == (3,)


def test_default_exit_status(tmp_path):
    path = tmp_path / "n.yml"
    path.write_text("exec_file: \"true\"\n")
    neuron = Neuron.load(path)
    assert neuron.assert_exit_status == (0,)
    assert neuron.name == "n"


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "name: x\n",
        "name: [broken\n",
        "exec_file: x\nassertExitStatus: [abc]\n",
    ],
)
def test_malformed_definitions(tmp_path, content):
    path = tmp_path / "bad.yml"
    path.write_text(content)
    with pytest.raises(NeuronLoadError):
        Neuron.load(path)


def test_missing_definition_file(tmp_path):
    with pytest.raises(NeuronLoadError):
        Neuron.load(tmp_path / "missing.yml")


def test_non_utf8_definition(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_bytes(b"name: bad\nexec_file: /bin/true\ndescription: \xff\n")

    with pytest.raises(NeuronLoadError, match="not valid UTF-8"):
        Neuron.load(path)


@pytest.mark.asyncio
async def test_excite_success(synapse_dir):
    path = write_neuron(
        synapse_dir,
        "ok",
        "echo hello",
        pre_exec_debug="Checking things",
        post_exec_success_debug="Everything fine",
    )
    out = io.StringIO()

    excitation = await Neuron.load(path).excite(out)

    assert excitation.exit_code == 0
    assert excitation.stdout == "hello\n"
    assert excitation.stderr == ""
    assert out.getvalue() == "===> Checking things\nEverything fine\n"


@pytest.mark.asyncio
async def test_excite_non_zero_exit_is_not_an_exception(synapse_dir):
    path = write_neuron(
        synapse_dir,
        "bad",
        "echo oops >&2\nexit 120",
        pre_exec_debug="Checking maxconn",
        post_exec_success_debug="fine",
        post_exec_fail_debug={120: "Found maxconn rate to be too low"},
    )
    out = io.StringIO()

    excitation = await Neuron.load(path).excite(out)

    assert excitation.exit_code == 120
    assert excitation.stderr == "oops\n"
    assert "Found maxconn rate to be too low" in out.getvalue()
    assert "fine" not in out.getvalue()


@pytest.mark.asyncio
async def test_accepted_non_zero_exit_prints_success_message(synapse_dir):
    path = write_neuron(
        synapse_dir, "killed", "exit 137", assertExitStatus=[0, 137], post_exec_success_debug="ok"
    )
    out = io.StringIO()

    excitation = await Neuron.load(path).excite(out)

    assert excitation.exit_code == 137
    assert out.getvalue().endswith("ok\n")


@pytest.mark.asyncio
async def test_launch_failure(tmp_path):
    path = tmp_path / "ghost.yml"
    path.write_text("name: ghost\nexec_file: /nonexistent/definitely-not-here\n")

    with pytest.raises(NeuronLaunchError) as exc_info:
        await Neuron.load(path).excite(io.StringIO())

    assert exc_info.value.exit_code == -1
    assert exc_info.value.neuron == "ghost"
    assert isinstance(exc_info.value.__cause__, OSError)


@pytest.mark.asyncio
async def test_exec_file_falls_back_to_path(tmp_path):
    path = tmp_path / "t.yml"
    path.write_text("name: t\nexec_file: \"true\"\n")

    excitation = await NeuronRunner().excite(path, io.StringIO())
    assert excitation.exit_code == 0


@pytest.mark.asyncio
async def test_runner_loads_fresh_each_time(synapse_dir):
    path = write_neuron(synapse_dir, "changing", "exit 0")
    runner = NeuronRunner()

    first = await runner.excite(path, io.StringIO())
    (synapse_dir / "neurons" / "changing.sh").write_text("#!/bin/sh\nexit 3\n")
    second = await runner.excite(path, io.StringIO())

    assert (first.exit_code, second.exit_code) == (0, 3)


def test_resolve_prefers_yml(synapse_dir):
    neurons = synapse_dir / "neurons"
    (neurons / "a.yml").write_text("exec_file: \"true\"\n")
    (neurons / "a").write_text("exec_file: \"true\"\n")
    assert resolve_neuron_path(synapse_dir, "a") == neurons / "a.yml"


def test_resolve_bare_name(synapse_dir):
    bare = synapse_dir / "neurons" / "b"
    bare.write_text("exec_file: \"true\"\n")
    assert resolve_neuron_path(synapse_dir, "b") == bare


def test_resolve_missing(synapse_dir):
    with pytest.raises(NeuronNotFoundError, match="neuron not found: ghost"):
        resolve_neuron_path(synapse_dir, "ghost")
