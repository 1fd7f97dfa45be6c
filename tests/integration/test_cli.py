"""Integration tests for the promptweave CLI."""

import pytest
from click.testing import CliRunner

from block_document import PromptBlock, load_document
from promptweave.cli import cli
from promptweave.services.draft_store import DraftStore
from promptweave.services.prompt_store import PromptStore


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    path = tmp_path / "data"
    monkeypatch.setenv("PROMPTWEAVE_DATA_DIR", str(path))
    return path


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, *args, **kwargs):
    return runner.invoke(cli, list(args), catch_exceptions=False, **kwargs)


def draft_blocks(data_dir, draft_id):
    draft = DraftStore(data_dir / "drafts.json").get(draft_id)
    return load_document(draft.content)


class TestGlobalOptions:
    """Tests for options on the root command."""

    def test_version(self, runner):
        result = invoke(runner, "--version")

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_invalid_config_file(self, runner, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("storage:\n  draft_history_limit: 0\n")

        result = invoke(runner, "--config", str(config_file), "prompts", "list")

        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output

    def test_config_file_sets_data_dir(self, runner, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(f"storage:\n  data_dir: {tmp_path / 'custom'}\n")

        result = invoke(runner, "--config", str(config_file), "prompts", "add", "Tone", "--content", "Be concise.")

        assert result.exit_code == 0
        assert len(PromptStore(tmp_path / "custom" / "prompts.json").list_prompts()) == 1

    def test_writes_log_file(self, runner, data_dir, isolated_home):
        invoke(runner, "prompts", "list")

        assert (isolated_home / ".cache" / "promptweave" / "logs" / "promptweave.log").exists()

    @pytest.mark.parametrize("level,logged", [("warning", False), ("info", True), ("DEBUG", True)])
    def test_log_level_option(self, runner, data_dir, isolated_home, level, logged):
        invoke(runner, "--log-level", level, "prompts", "add", "Tone", "--content", "Be concise.")

        log_text = (isolated_home / ".cache" / "promptweave" / "logs" / "promptweave.log").read_text()
        assert ('"prompt_created"' in log_text) is logged

    def test_invalid_log_level_rejected(self, runner):
        result = runner.invoke(cli, ["--log-level", "loud", "prompts", "list"])

        assert result.exit_code == 2


class TestPromptsCommands:
    """Tests for the prompt library commands."""

    def test_add_and_list(self, runner, data_dir):
        result = invoke(runner, "prompts", "add", "Greeting", "--content", "Hi there", "--tag", "social")
        assert result.exit_code == 0
        prompt_id = result.output.strip()

        result = invoke(runner, "prompts", "list")

        assert result.exit_code == 0
        assert "Greeting" in result.output
        assert PromptStore(data_dir / "prompts.json").get(prompt_id).tags == ["social"]

    def test_add_reads_stdin(self, runner, data_dir):
        result = invoke(runner, "prompts", "add", "Tone", input="Be concise.\n")

        assert result.exit_code == 0
        prompt = PromptStore(data_dir / "prompts.json").get(result.output.strip())
        assert prompt.content == "Be concise."

    def test_add_blank_content_fails(self, runner, data_dir):
        result = invoke(runner, "prompts", "add", "Empty", "--content", "   ")

        assert result.exit_code == 1
        assert "must not be empty" in result.output

    def test_list_empty(self, runner, data_dir):
        result = invoke(runner, "prompts", "list")

        assert result.exit_code == 0
        assert "No prompts found." in result.output

    def test_list_filters_by_tag(self, runner, data_dir):
        invoke(runner, "prompts", "add", "Greeting", "--content", "Hi", "--tag", "social")
        invoke(runner, "prompts", "add", "Tone", "--content", "Short", "--tag", "style")

        result = invoke(runner, "prompts", "list", "--tag", "style")

        assert "Tone" in result.output
        assert "Greeting" not in result.output

    def test_tags(self, runner, data_dir):
        invoke(runner, "prompts", "add", "Greeting", "--content", "Hi", "--tag", "social", "--tag", "warm")

        result = invoke(runner, "prompts", "tags")

        assert result.output.split() == ["social", "warm"]

    def test_delete(self, runner, data_dir):
        prompt_id = invoke(runner, "prompts", "add", "Greeting", "--content", "Hi").output.strip()

        result = invoke(runner, "prompts", "delete", prompt_id)
        assert result.exit_code == 0

        result = invoke(runner, "prompts", "delete", prompt_id)
        assert result.exit_code == 1
        assert "Prompt not found" in result.output


class TestDraftsCommands:
    """Tests for composing drafts from the command line."""

    @pytest.fixture
    def prompt_id(self, runner, data_dir):
        return invoke(runner, "prompts", "add", "Greeting", "--content", "Hi there").output.strip()

    @pytest.fixture
    def draft_id(self, runner, data_dir):
        return invoke(runner, "drafts", "new", "--title", "Mail", "--text", "hello").output.strip()

    def test_new_and_list(self, runner, data_dir, draft_id):
        result = invoke(runner, "drafts", "list")

        assert result.exit_code == 0
        assert "Mail" in result.output
        assert DraftStore(data_dir / "drafts.json").get(draft_id).title == "Mail"

    def test_new_empty_fails(self, runner, data_dir):
        result = invoke(runner, "drafts", "new", "--text", "  ")

        assert result.exit_code == 1
        assert "Nothing to save" in result.output

    def test_insert_and_show(self, runner, data_dir, draft_id, prompt_id):
        result = invoke(runner, "drafts", "insert", draft_id, prompt_id)
        assert result.exit_code == 0

        result = invoke(runner, "drafts", "show", draft_id)

        assert result.output == "hello\n\nHi there\n"
        kinds = [block.kind for block in draft_blocks(data_dir, draft_id)]
        assert kinds == ["text", "prompt", "text"]

    def test_insert_out_of_range_fails(self, runner, data_dir, draft_id, prompt_id):
        result = invoke(runner, "drafts", "insert", draft_id, prompt_id, "--at", "9")

        assert result.exit_code == 1
        assert "Cannot insert" in result.output

    def test_insert_unknown_prompt_fails(self, runner, data_dir, draft_id):
        result = invoke(runner, "drafts", "insert", draft_id, "missing")

        assert result.exit_code == 1
        assert "Prompt not found" in result.output

    def test_blocks_table(self, runner, data_dir, draft_id, prompt_id):
        invoke(runner, "drafts", "insert", draft_id, prompt_id)

        result = invoke(runner, "drafts", "blocks", draft_id)

        assert result.exit_code == 0
        assert "prompt" in result.output
        assert "[Greeting]" in result.output

    def test_move_prompt_to_top(self, runner, data_dir, draft_id, prompt_id):
        invoke(runner, "drafts", "insert", draft_id, prompt_id)
        prompt_block = draft_blocks(data_dir, draft_id)[1]

        result = invoke(runner, "drafts", "move", draft_id, prompt_block.id, "0")
        assert result.exit_code == 0

        blocks = draft_blocks(data_dir, draft_id)
        assert blocks[0] == prompt_block
        assert invoke(runner, "drafts", "show", draft_id).output == "Hi there\n\nhello\n"

    def test_move_noop(self, runner, data_dir, draft_id):
        text_block = draft_blocks(data_dir, draft_id)[0]

        result = invoke(runner, "drafts", "move", draft_id, text_block.id, "0")

        assert result.exit_code == 0
        assert "Nothing to move." in result.output

    def test_remove_prompt_block(self, runner, data_dir, draft_id, prompt_id):
        invoke(runner, "drafts", "insert", draft_id, prompt_id)
        prompt_block = draft_blocks(data_dir, draft_id)[1]

        result = invoke(runner, "drafts", "remove-block", draft_id, prompt_block.id)

        assert result.exit_code == 0
        blocks = draft_blocks(data_dir, draft_id)
        assert not any(isinstance(block, PromptBlock) for block in blocks)

    def test_remove_unknown_block_fails(self, runner, data_dir, draft_id):
        result = invoke(runner, "drafts", "remove-block", draft_id, "missing")

        assert result.exit_code == 1
        assert "Block not found" in result.output

    def test_removing_all_content_drops_draft(self, runner, data_dir, draft_id):
        text_block = draft_blocks(data_dir, draft_id)[0]

        invoke(runner, "drafts", "remove-block", draft_id, text_block.id)

        assert DraftStore(data_dir / "drafts.json").get(draft_id) is None

    def test_delete(self, runner, data_dir, draft_id):
        result = invoke(runner, "drafts", "delete", draft_id)
        assert result.exit_code == 0

        result = invoke(runner, "drafts", "show", draft_id)
        assert result.exit_code == 1
        assert "Draft not found" in result.output

    def test_snapshot_survives_prompt_delete(self, runner, data_dir, draft_id, prompt_id):
        invoke(runner, "drafts", "insert", draft_id, prompt_id)

        invoke(runner, "prompts", "delete", prompt_id)

        assert invoke(runner, "drafts", "show", draft_id).output == "hello\n\nHi there\n"
