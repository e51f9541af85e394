"""
End-to-end tests: YAML on disk, real shell-script neurons, JSON history.
"""

import io
import textwrap

import pytest
from conftest import write_neuron

from cortex import (
    CircularDependencyError,
    ExecutionStatus,
    Executor,
    HistoryManager,
    NeuronStatus,
    load_from_directory,
)


def write_config(synapse_dir, content):
    (synapse_dir / "config.yml").write_text(textwrap.dedent(content))


@pytest.mark.asyncio
async def test_health_check_partial_run(synapse_dir, json_history):
    write_neuron(synapse_dir, "check-nginx", "echo nginx ok", pre_exec_debug="Checking nginx")
    write_neuron(synapse_dir, "check-api", "echo api ok", pre_exec_debug="Checking api")
    write_neuron(
        synapse_dir,
        "check-db",
        "echo connection refused >&2\nexit 1",
        pre_exec_debug="Checking db",
        post_exec_fail_debug={1: "Database is unreachable"},
    )
    write_config(
        synapse_dir,
        """
        name: health-check
        neurons:
          - check-nginx
          - check-api
          - check-db
        """,
    )
    out = io.StringIO()

    synapse = load_from_directory(synapse_dir)
    record = await Executor(history=json_history, out=out).execute(synapse, synapse_dir)

    assert record.status is ExecutionStatus.PARTIAL
    assert [r.name for r in record.neuron_results] == ["check-nginx", "check-api", "check-db"]
    assert [r.status for r in record.neuron_results] == [
        NeuronStatus.SUCCESS,
        NeuronStatus.SUCCESS,
        NeuronStatus.FAILED,
    ]
    db = record.result_for("check-db")
    assert db.exit_code == 1
    assert db.stderr == "connection refused\n"
    assert record.result_for("check-nginx").stdout == "nginx ok\n"

    text = out.getvalue()
    assert "Executing: check-nginx\n===> Checking nginx\n" in text
    assert "Database is unreachable" in text

    history = await json_history.get_history("health-check")
    assert len(history) == 1
    assert history[0].id == record.id
    assert history[0].status is ExecutionStatus.PARTIAL
    assert (await json_history.get_execution_logs("health-check", record.id)) == history[0]


@pytest.mark.asyncio
async def test_parallel_run_with_rollback_and_stop(synapse_dir, json_history):
    marker = synapse_dir / "rolled-back"
    write_neuron(synapse_dir, "drain", "exit 0")
    write_neuron(synapse_dir, "restart", "exit 2")
    write_neuron(synapse_dir, "undrain", f"touch {marker}")
    write_neuron(synapse_dir, "verify", "exit 0")
    write_config(
        synapse_dir,
        """
        name: restart-nginx
        execution: parallel
        maxConcurrency: 2
        stopOnError: true
        neurons:
          - drain
          - name: restart
            dependsOn: [drain]
            onFailure: [undrain]
          - name: verify
            dependsOn: [restart]
        """,
    )

    synapse = load_from_directory(synapse_dir)
    out = io.StringIO()
    record = await Executor(history=json_history, out=out).execute(synapse, synapse_dir)

    assert marker.exists()
    assert record.status is ExecutionStatus.PARTIAL
    assert [r.name for r in record.neuron_results] == ["drain", "restart"]
    assert record.result_for("restart").error == "exit code 2"
    assert "Stopping execution due to error in restart" in out.getvalue()
    assert [r.id for r in await json_history.get_history("restart-nginx")] == [record.id]


@pytest.mark.asyncio
async def test_cyclic_definition_never_executes(synapse_dir, json_history):
    marker = synapse_dir / "ran"
    write_neuron(synapse_dir, "a", f"touch {marker}")
    write_neuron(synapse_dir, "b", f"touch {marker}")
    write_config(
        synapse_dir,
        """
        name: loop
        execution: parallel
        neurons:
          - name: a
            dependsOn: [b]
          - name: b
            dependsOn: [a]
        """,
    )

    with pytest.raises(CircularDependencyError):
        load_from_directory(synapse_dir)

    assert not marker.exists()
    assert await json_history.get_history("loop") == []


@pytest.mark.asyncio
@pytest.mark.parametrize("execution", ["sequential", "parallel"])
async def test_undecodable_neuron_file_fails_only_that_neuron(synapse_dir, json_history, execution):
    write_neuron(synapse_dir, "ok", "echo fine")
    (synapse_dir / "neurons" / "bad.yml").write_bytes(b"name: bad\nexec_file: \xff\n")
    write_config(
        synapse_dir,
        f"""
        name: mixed
        execution: {execution}
        neurons:
          - bad
          - ok
        """,
    )

    synapse = load_from_directory(synapse_dir)
    record = await Executor(history=json_history, out=io.StringIO()).execute(synapse, synapse_dir)

    bad = record.result_for("bad")
    assert bad.status is NeuronStatus.FAILED
    assert bad.exit_code == -1
    assert "not valid UTF-8" in bad.error
    assert record.result_for("ok").status is NeuronStatus.SUCCESS
    assert record.status is ExecutionStatus.PARTIAL
    assert [r.id for r in await json_history.get_history("mixed")] == [record.id]
