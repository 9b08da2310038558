import json

from click.testing import CliRunner

from community_search.cli.search_cli import cli

from conftest import ARTICLES, SEARCH_SYNONYMS


def test_db_init_and_load(tmp_path):
    db_path = str(tmp_path / "cli.db")
    data_file = tmp_path / "content.json"
    data_file.write_text(json.dumps({
        "content_articles": ARTICLES,
        "search_synonyms": SEARCH_SYNONYMS,
    }))

    runner = CliRunner()

    result = runner.invoke(cli, ["db", "init", "--db-path", db_path])
    assert result.exit_code == 0
    assert "Database initialized" in result.output

    result = runner.invoke(cli, ["db", "load", str(data_file), "--db-path", db_path])
    assert result.exit_code == 0
    assert "content_articles" in result.output

    result = runner.invoke(cli, ["search", "password", "--db-path", db_path])
    assert result.exit_code == 0
    assert "2 results" in result.output


def test_search_command(db_path):
    result = CliRunner().invoke(cli, ["search", "dark", "--type", "feature_requests", "--db-path", db_path])
    assert result.exit_code == 0
    assert "1 results" in result.output
    assert "feature_request" in result.output


def test_search_command_rejects_unknown_type(db_path):
    result = CliRunner().invoke(cli, ["search", "dark", "--type", "videos", "--db-path", db_path])
    assert result.exit_code == 1
    assert "Unknown content type" in result.output


def test_suggest_command(db_path):
    result = CliRunner().invoke(cli, ["suggest", "pass", "--db-path", db_path])
    assert result.exit_code == 0
    assert "passcode" in result.output


def test_suggest_short_query(db_path):
    result = CliRunner().invoke(cli, ["suggest", "p", "--db-path", db_path])
    assert result.exit_code == 0
    assert "No suggestions" in result.output
