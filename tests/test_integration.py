"""Integration tests for the command line interface."""

from datetime import datetime

from queststats.cli.commands.chart import parse_where
from queststats.cli.main import cli
from queststats.domain.entities import FilterOperator


def _seed(db):
    work = db.create_category(name="Work", created_at=datetime(2024, 1, 1))
    health = db.create_category(name="Health", created_at=datetime(2024, 1, 2))
    first = db.create_task(
        title="Write report", category_id=work, priority="HIGH", is_completed=True,
        created_at=datetime(2024, 3, 1), completed_at=datetime(2024, 3, 9, 10),
    )
    db.create_task(
        title="Gym", category_id=health, priority="MEDIUM", is_completed=True,
        created_at=datetime(2024, 3, 2), completed_at=datetime(2024, 3, 12, 7),
    )
    db.create_task(title="Plan sprint", category_id=work, priority="HIGH", created_at=datetime(2024, 3, 3))
    db.create_xp_transaction(5, "TASK", reference_id=first, timestamp=datetime(2024, 3, 9, 10))
    db.create_xp_transaction(20, "CALENDAR", timestamp=datetime(2024, 3, 10))
    db.create_xp_transaction(10, "TASK", reference_id=first, timestamp=datetime(2024, 3, 12))
    return work, health


def test_fields_command(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "fields", "tasks", "--chart-type", "scatter"]
    )

    assert result.exit_code == 0
    assert "completed_at" in result.output
    assert "xp_reward" in result.output
    assert "axes: X/Y" in result.output


def test_templates_command(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "templates"])

    assert result.exit_code == 0
    assert "XP over time" in result.output
    assert "Tasks by category" in result.output


def test_chart_xp_by_source(cli_runner, temp_db):
    _seed(temp_db)

    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "chart", "--source", "xp_transactions", "--x", "source", "--y", "amount",
            "--aggregation", "sum", "--group-by", "category",
        ],
    )

    assert result.exit_code == 0
    lines = [line.split() for line in result.output.splitlines() if line.startswith("  ")]
    assert lines == [["TASK", "15"], ["CALENDAR", "20"]]


def test_chart_daily_completions(cli_runner, temp_db):
    _seed(temp_db)

    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "chart", "--source", "tasks", "--x", "completed_at", "--group-by", "date",
            "--interval", "day", "--range", "last-7-days", "--as-of", "2024-03-15",
        ],
    )

    assert result.exit_code == 0
    rows = [line.split() for line in result.output.splitlines() if line.startswith("  ")]
    assert [row[0] for row in rows] == [f"2024-03-{day:02d}" for day in range(9, 16)]
    assert [row[1] for row in rows] == ["1", "0", "0", "1", "0", "0", "0"]


def test_chart_template_with_scope_and_filter(cli_runner, temp_db):
    work, _ = _seed(temp_db)

    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "chart", "--template", "priority distribution",
            "--category-id", str(work), "--where", "is_completed:eq:false",
        ],
    )

    assert result.exit_code == 0
    assert "Priority distribution" in result.output
    rows = [line.split() for line in result.output.splitlines() if line.startswith("  ")]
    assert rows == [["HIGH", "1"]]


def test_chart_invalid_configuration(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "chart", "--source", "tasks", "--x", "title", "--chart-type", "scatter",
        ],
    )

    assert result.exit_code == 1
    assert "Invalid chart configuration" in result.output
    assert "requires a Y-axis field" in result.output


def test_chart_unknown_field(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "chart", "--source", "tasks", "--x", "bogus"]
    )

    assert result.exit_code == 1
    assert "Field 'bogus' not found" in result.output


def test_chart_requires_source_and_x(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "chart"])

    assert result.exit_code == 1
    assert "--source and --x are required" in result.output


def test_chart_empty_result(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "chart", "--source", "categories", "--x", "name", "--group-by", "category",
        ],
    )

    assert result.exit_code == 0
    assert "No data for this chart." in result.output


def test_db_path_from_environment(cli_runner, temp_db):
    _seed(temp_db)

    result = cli_runner.invoke(
        cli,
        ["chart", "--source", "categories", "--x", "name", "--group-by", "category"],
        env={"QUESTSTATS_DB_PATH": temp_db.database_path},
    )

    assert result.exit_code == 0
    assert "Work" in result.output
    assert "Health" in result.output


def test_parse_where():
    data_filter = parse_where("title:contains:a:b")

    assert data_filter.field_id == "title"
    assert data_filter.operator == FilterOperator.CONTAINS
    assert data_filter.value == "a:b"


def test_parse_where_rejects_bad_operator(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "chart", "--source", "tasks", "--x", "priority", "--where", "title:like:x",
        ],
    )

    assert result.exit_code == 1
    assert "Unknown filter operator" in result.output


def test_chart_as_of_drives_overdue_flags(cli_runner, temp_db):
    temp_db.create_task(title="Taxes", due_date=datetime(2024, 3, 14))
    args = [
        "--db-path", temp_db.database_path,
        "chart", "--source", "tasks", "--x", "is_overdue", "--group-by", "category",
    ]

    before = cli_runner.invoke(cli, args + ["--as-of", "2024-03-10"])
    after = cli_runner.invoke(cli, args + ["--as-of", "2024-03-20"])

    assert before.exit_code == 0
    assert after.exit_code == 0
    assert [line.split() for line in before.output.splitlines() if line.startswith("  ")] == [["false", "1"]]
    assert [line.split() for line in after.output.splitlines() if line.startswith("  ")] == [["true", "1"]]
