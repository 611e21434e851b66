"""
Module 06 - CLI Unit Tests

Tests for the allowlist command line:
1. build writes the dump and prints the root
2. prove writes a proof file; unknown values exit 3
3. verify exits 0 for a good proof and 2 for a bad one
4. inspect validates and lists a dump
5. sign / recover round trip, and signing without a domain fails
"""
import json

import pytest

from allowlist_cli.main import (
    EXIT_NOT_FOUND,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    main,
)

from fixtures.common import (
    ADDR_A,
    ADDR_C,
    ADDR_D,
    ADDR_X,
    ALLOWLIST_A,
    CHAIN_ID,
    PROOF_A,
    PROOF_C,
    ROOT_A,
    ROOT_B,
    SIGNER_ADDRESS,
    SIGNER_KEY,
    VERIFYING_CONTRACT,
    make_dump,
)


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Temp directory with a config file pointing at temp artifacts."""
    monkeypatch.chdir(tmp_path)
    config = {
        "storage": {
            "tree_path": str(tmp_path / "Target" / "tree.json"),
            "proof_path": str(tmp_path / "Target" / "proof.json"),
        },
        "signing": {
            "chain_id": CHAIN_ID,
            "verifying_contract": VERIFYING_CONTRACT,
        },
    }
    (tmp_path / "cli-config.json").write_text(json.dumps(config))
    return tmp_path


@pytest.fixture
def with_tree(workspace):
    path = workspace / "Target" / "tree.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(make_dump()))
    return path


def run(workspace, *argv):
    return main(["-c", str(workspace / "cli-config.json"), *argv])


class TestBuild:
    """Tests for the build command."""

    def test_build_json(self, workspace, capsys):
        source = workspace / "allowlist.txt"
        source.write_text("\n".join(ALLOWLIST_A))
        code = run(workspace, "build", "--allowlist", str(source), "--json")
        assert code == EXIT_SUCCESS
        summary = json.loads(capsys.readouterr().out)
        assert summary["root"] == ROOT_A
        assert summary["leaf_count"] == 5
        assert (workspace / "Target" / "tree.json").exists()

    def test_build_human(self, workspace, capsys):
        source = workspace / "allowlist.txt"
        source.write_text("\n".join(ALLOWLIST_A))
        assert run(workspace, "build", "-a", str(source)) == EXIT_SUCCESS
        assert f"Merkle Root: {ROOT_A}" in capsys.readouterr().out

    def test_build_empty_allowlist(self, workspace, capsys):
        source = workspace / "empty.txt"
        source.write_text("# nobody yet\n")
        assert run(workspace, "build", "-a", str(source)) == EXIT_RUNTIME_ERROR
        assert "empty" in capsys.readouterr().err

    def test_build_missing_allowlist(self, workspace):
        assert run(workspace, "build", "-a", str(workspace / "missing.txt")) == EXIT_RUNTIME_ERROR

    def test_build_without_source(self, workspace):
        assert run(workspace, "build") == EXIT_RUNTIME_ERROR


class TestProve:
    """Tests for the prove command."""

    def test_prove_writes_proof_file(self, workspace, with_tree, capsys):
        assert run(workspace, "prove", ADDR_C) == EXIT_SUCCESS
        written = json.loads((workspace / "Target" / "proof.json").read_text())
        assert written == PROOF_C
        out = capsys.readouterr().out
        assert "Value:" in out
        assert "Proof:" in out

    def test_prove_index_json(self, workspace, with_tree, capsys):
        assert run(workspace, "prove", "--index", "0", "--json", "--no-write") == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["proof"] == PROOF_A
        assert not (workspace / "Target" / "proof.json").exists()

    def test_prove_unknown_value(self, workspace, with_tree):
        assert run(workspace, "prove", ADDR_X) == EXIT_NOT_FOUND

    def test_prove_index_out_of_range(self, workspace, with_tree):
        assert run(workspace, "prove", "--index", "5") == EXIT_RUNTIME_ERROR

    def test_prove_multi(self, workspace, with_tree, capsys):
        out_path = workspace / "multi.json"
        code = run(workspace, "prove", "--multi", ADDR_A, ADDR_D, "--out", str(out_path), "--json")
        assert code == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["root"] == ROOT_A
        assert json.loads(out_path.read_text())["proof_flags"] == data["proof_flags"]

    def test_prove_without_tree(self, workspace):
        assert run(workspace, "prove", ADDR_A) == EXIT_RUNTIME_ERROR


class TestVerify:
    """Tests for the verify command."""

    def test_verify_hex_and_root(self, workspace):
        code = run(workspace, "verify", ADDR_A, "--proof-hex", *PROOF_A, "--root", ROOT_A)
        assert code == EXIT_SUCCESS

    def test_verify_wrong_root(self, workspace):
        code = run(workspace, "verify", ADDR_A, "--proof-hex", *PROOF_A, "--root", ROOT_B)
        assert code == EXIT_VERIFICATION_FAILED

    def test_verify_proof_file_against_tree(self, workspace, with_tree, capsys):
        assert run(workspace, "prove", ADDR_C) == EXIT_SUCCESS
        capsys.readouterr()
        assert run(workspace, "verify", ADDR_C, "--json") == EXIT_SUCCESS
        summary = json.loads(capsys.readouterr().out)
        assert summary["ok"] is True
        assert summary["root"] == ROOT_A

    def test_verify_wrong_value(self, workspace, with_tree):
        code = run(workspace, "verify", ADDR_X, "--proof-hex", *PROOF_C)
        assert code == EXIT_VERIFICATION_FAILED


class TestInspect:
    """Tests for the inspect command."""

    def test_inspect_json(self, workspace, with_tree, capsys):
        assert run(workspace, "inspect", "--validate", "--entries", "--json") == EXIT_SUCCESS
        summary = json.loads(capsys.readouterr().out)
        assert summary["root"] == ROOT_A
        assert summary["leaf_count"] == 5
        assert summary["depth"] == 4
        assert summary["valid"] is True
        assert summary["entries"][2] == {"index": 2, "value": [ADDR_C], "tree_index": 8}

    def test_inspect_render(self, workspace, with_tree, capsys):
        assert run(workspace, "inspect", "--render") == EXIT_SUCCESS
        assert f"0) {ROOT_A}" in capsys.readouterr().out

    def test_inspect_tampered(self, workspace, with_tree):
        data = json.loads(with_tree.read_text())
        data["values"][0]["value"] = [ADDR_X]
        with_tree.write_text(json.dumps(data))
        assert run(workspace, "inspect", "--validate") == EXIT_VERIFICATION_FAILED


class TestSignatures:
    """Tests for the sign and recover commands."""

    def test_sign_and_recover(self, workspace, capsys):
        code = run(
            workspace, "sign", "--to", ADDR_C, "--token-id", "9",
            "--timestamp", "1700000000", "--key", SIGNER_KEY, "--json",
        )
        assert code == EXIT_SUCCESS
        signed = json.loads(capsys.readouterr().out)
        assert signed["from"] == SIGNER_ADDRESS

        code = run(
            workspace, "recover", "--from", SIGNER_ADDRESS, "--to", ADDR_C,
            "--token-id", "9", "--timestamp", "1700000000",
            "--signature", signed["signature"],
        )
        assert code == EXIT_SUCCESS
        assert "matches_from: true" in capsys.readouterr().out

    def test_recover_other_sender(self, workspace, capsys):
        run(
            workspace, "sign", "--to", ADDR_C, "--token-id", "9",
            "--timestamp", "1700000000", "--key", SIGNER_KEY, "--json",
        )
        signed = json.loads(capsys.readouterr().out)
        code = run(
            workspace, "recover", "--from", ADDR_D, "--to", ADDR_C,
            "--token-id", "9", "--timestamp", "1700000000",
            "--signature", signed["signature"],
        )
        assert code == EXIT_VERIFICATION_FAILED

    def test_sign_without_domain(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        config = tmp_path / "bare.json"
        config.write_text("{}")
        code = main(["-c", str(config), "sign", "--to", ADDR_C, "--token-id", "1", "--key", SIGNER_KEY])
        assert code == EXIT_RUNTIME_ERROR
        assert "chain id" in capsys.readouterr().err

    def test_sign_without_key(self, workspace, capsys):
        assert run(workspace, "sign", "--to", ADDR_C, "--token-id", "1") == EXIT_RUNTIME_ERROR
        assert "private key" in capsys.readouterr().err


class TestConfigCommand:
    """Tests for the config command and config loading."""

    def test_show_masks_key(self, workspace, monkeypatch, capsys):
        monkeypatch.setenv("ALLOWLIST_SIGNER_PRIVATE_KEY", SIGNER_KEY)
        assert run(workspace, "config", "--show") == EXIT_SUCCESS
        shown = json.loads(capsys.readouterr().out)
        assert shown["signing"]["private_key"] == "***"
        assert shown["signing"]["chain_id"] == CHAIN_ID

    def test_init_writes_template(self, workspace):
        target = workspace / "new-config.json"
        assert run(workspace, "config", "--init", "--path", str(target)) == EXIT_SUCCESS
        assert json.loads(target.read_text())["tree"]["leaf_encoding"] == ["address"]
        assert run(workspace, "config", "--init", "--path", str(target)) == EXIT_RUNTIME_ERROR

    def test_bad_config_file(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{oops")
        assert main(["-c", str(bad), "inspect"]) == EXIT_RUNTIME_ERROR

    def test_no_command(self):
        assert main([]) == EXIT_RUNTIME_ERROR
