"""Tests for the coop-assessment CLI."""

import json

import pytest
from click.testing import CliRunner

from coop_assessment.cli import main as cli


ANSWERS = [
    {"questionId": "m1", "value": 4},
    {"questionId": "m2", "value": 2},
    {"questionId": "o1", "value": 5},
]


@pytest.fixture
def answers_file(tmp_path):
    path = tmp_path / "answers.json"
    path.write_text(json.dumps(ANSWERS), encoding="utf-8")
    return path


# === assess ===


class TestAssessCommand:

    def test_help(self):
        result = CliRunner().invoke(cli, ["assess", "--help"])
        assert result.exit_code == 0
        assert "Score a submission" in result.output

    def test_json_output(self, answers_file, taxonomy_file):
        result = CliRunner().invoke(cli, [
            "assess",
            "--answers", str(answers_file),
            "--taxonomy", str(taxonomy_file),
            "--cooperative-id", "42",
            "--json-output",
        ])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["cooperativeId"] == "42"
        assert payload["overallScore"] == 4.0
        assert payload["interpretation"] == "Bon"
        assert payload["cooperativeScore"] == 80
        assert payload["scoresByCategory"] == {
            "Diagnostic Marketing - Digital": 3.0,
            "Diagnostic Opérationnel - Logistique": 5.0,
        }

    def test_object_file_with_cooperative_id(self, tmp_path, taxonomy_file):
        path = tmp_path / "submission.json"
        path.write_text(json.dumps({"cooperativeId": 7, "answers": ANSWERS}), encoding="utf-8")
        out = tmp_path / "result.json"

        result = CliRunner().invoke(cli, [
            "assess", "-a", str(path), "-t", str(taxonomy_file), "-j", "-o", str(out),
        ])
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text(encoding="utf-8"))["cooperativeId"] == 7

    def test_formatted_output(self, answers_file, taxonomy_file):
        result = CliRunner().invoke(cli, [
            "assess", "-a", str(answers_file), "-t", str(taxonomy_file),
        ])
        assert result.exit_code == 0, result.output
        assert "Assessment Summary" in result.output
        assert "4.00" in result.output
        assert "Bon" in result.output
        assert "Marketing mid" in result.output

    def test_unknown_question(self, tmp_path, taxonomy_file):
        path = tmp_path / "answers.json"
        path.write_text(json.dumps([{"questionId": "ghost", "value": 3}]), encoding="utf-8")

        result = CliRunner().invoke(cli, ["assess", "-a", str(path), "-t", str(taxonomy_file)])
        assert result.exit_code == 1
        assert "Unknown questionId: ghost" in result.output

    def test_empty_submission(self, tmp_path, taxonomy_file):
        path = tmp_path / "answers.json"
        path.write_text("[]", encoding="utf-8")

        result = CliRunner().invoke(cli, ["assess", "-a", str(path), "-t", str(taxonomy_file)])
        assert result.exit_code == 1
        assert "non-empty" in result.output

    def test_invalid_json(self, tmp_path, taxonomy_file):
        path = tmp_path / "answers.json"
        path.write_text("{oops", encoding="utf-8")

        result = CliRunner().invoke(cli, ["assess", "-a", str(path), "-t", str(taxonomy_file)])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_default_taxonomy(self, tmp_path):
        path = tmp_path / "answers.json"
        path.write_text(json.dumps([{"questionId": "O1", "value": 3}]), encoding="utf-8")

        result = CliRunner().invoke(cli, ["assess", "-a", str(path), "-j"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["interpretation"] == "Moyen"


# === questions / inspect / validate ===


class TestTaxonomyCommands:

    def test_questions_json(self, taxonomy_file):
        result = CliRunner().invoke(cli, ["questions", "-t", str(taxonomy_file), "-j"])
        assert result.exit_code == 0, result.output
        sections = json.loads(result.output)
        assert len(sections) == 5
        assert sections[0]["questions"][0] == {
            "id": "m1",
            "question": "Présence sur les réseaux sociaux ?",
            "answer": "1-5",
        }

    def test_questions_filter(self, taxonomy_file):
        result = CliRunner().invoke(cli, [
            "questions", "-t", str(taxonomy_file), "--category", "stratégique", "-j",
        ])
        assert result.exit_code == 0, result.output
        names = [s["category"] for s in json.loads(result.output)]
        assert names == ["Diagnostic Stratégique - Gouvernance", "Diagnostic Stratégique - Vision"]

    def test_questions_no_match(self, taxonomy_file):
        result = CliRunner().invoke(cli, ["questions", "-t", str(taxonomy_file), "--category", "zzz"])
        assert result.exit_code == 0
        assert "No matching categories" in result.output

    def test_inspect(self, taxonomy_file):
        result = CliRunner().invoke(cli, ["inspect", "-t", str(taxonomy_file)])
        assert result.exit_code == 0, result.output
        assert "Interpretation Bands" in result.output
        assert "Très faible" in result.output
        assert "tiered" in result.output
        assert "summary" in result.output

    def test_validate_valid(self, taxonomy_file):
        result = CliRunner().invoke(cli, ["validate", "-t", str(taxonomy_file)])
        assert result.exit_code == 0
        assert "Taxonomy valid" in result.output

    def test_validate_invalid(self, tmp_path, taxonomy_data):
        taxonomy_data["Scales"]["Axes"]["Marketing"]["recommendations"] = ["only one"]
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(taxonomy_data), encoding="utf-8")

        result = CliRunner().invoke(cli, ["validate", "-t", str(path)])
        assert result.exit_code == 1
        assert "Taxonomy invalid" in result.output
        assert "exactly 3" in result.output

    def test_validate_missing_file(self, tmp_path):
        result = CliRunner().invoke(cli, ["validate", "-t", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "not found" in result.output


# === report ===


class TestReportCommand:

    def test_report_json(self, tmp_path, taxonomy_file):
        records = [
            {
                "cooperativeId": 1,
                "overallScore": 2.0,
                "scoresByCategory": {"Diagnostic Marketing - Digital": 2.0},
                "interpretation": "Faible",
                "recommendations": ["Diagnostic Marketing - Digital: Marketing low"],
            },
            {
                "cooperativeId": 2,
                "overallScore": 4.0,
                "scoresByCategory": {"Diagnostic Marketing - Digital": 4.0},
                "interpretation": "Bon",
                "recommendations": ["Diagnostic Marketing - Digital: Marketing high"],
            },
        ]
        path = tmp_path / "results.json"
        path.write_text(json.dumps(records), encoding="utf-8")

        result = CliRunner().invoke(cli, ["report", "-r", str(path), "-t", str(taxonomy_file), "-j"])
        assert result.exit_code == 0, result.output
        report = json.loads(result.output)
        assert report["total"] == 2
        assert report["averageOverallScore"] == 3.0
        assert report["overallScoreDistribution"]["Faible"] == 1
        assert report["cooperativeScoreDistribution"]["40-59"] == 1
        assert report["cooperativeScoreDistribution"]["80-100"] == 1
        assert report["categoryPerformance"]["total_categories"] == 1
        assert report["topRecommendations"][0]["count"] == 2

    def test_report_formatted(self, tmp_path, taxonomy_file):
        path = tmp_path / "results.json"
        path.write_text(json.dumps([{
            "overallScore": 3.0,
            "scoresByCategory": {"A": 3.0},
            "interpretation": "Moyen",
            "recommendations": [],
        }]), encoding="utf-8")

        result = CliRunner().invoke(cli, ["report", "-r", str(path), "-t", str(taxonomy_file)])
        assert result.exit_code == 0, result.output
        assert "Assessment Report" in result.output
        assert "Moyen" in result.output

    def test_report_accepts_decimal_text(self, tmp_path, taxonomy_file):
        path = tmp_path / "results.json"
        path.write_text(json.dumps([{
            "overallScore": "4.00",
            "scoresByCategory": {"A": "4.00"},
            "interpretation": "Bon",
            "recommendations": [],
        }]), encoding="utf-8")

        result = CliRunner().invoke(cli, ["report", "-r", str(path), "-t", str(taxonomy_file), "-j"])
        assert result.exit_code == 0, result.output
        report = json.loads(result.output)
        assert report["averageOverallScore"] == 4.0
        assert report["cooperativeScoreDistribution"]["80-100"] == 1

    def test_report_rejects_non_object_record(self, tmp_path, taxonomy_file):
        path = tmp_path / "results.json"
        path.write_text(json.dumps([{"overallScore": 3.0}, "oops"]), encoding="utf-8")

        result = CliRunner().invoke(cli, ["report", "-r", str(path), "-t", str(taxonomy_file)])
        assert result.exit_code == 1
        assert "Record #1 must be an object" in result.output

    def test_report_rejects_non_numeric_score(self, tmp_path, taxonomy_file):
        path = tmp_path / "results.json"
        path.write_text(json.dumps([{"overallScore": "high"}]), encoding="utf-8")

        result = CliRunner().invoke(cli, ["report", "-r", str(path), "-t", str(taxonomy_file)])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_report_rejects_non_list(self, tmp_path, taxonomy_file):
        path = tmp_path / "results.json"
        path.write_text("{}", encoding="utf-8")

        result = CliRunner().invoke(cli, ["report", "-r", str(path), "-t", str(taxonomy_file)])
        assert result.exit_code == 1
        assert "JSON array" in result.output


# === init-config / global options ===


class TestConfigOptions:

    def test_init_config(self, tmp_path):
        out = tmp_path / "assessment-config.yaml"
        result = CliRunner().invoke(cli, ["init-config", "--out", str(out)])
        assert result.exit_code == 0
        assert out.exists()

    def test_init_config_refuses_overwrite(self, tmp_path):
        out = tmp_path / "assessment-config.yaml"
        out.write_text("keep: me\n", encoding="utf-8")
        result = CliRunner().invoke(cli, ["init-config", "--out", str(out)])
        assert result.exit_code == 1
        assert out.read_text(encoding="utf-8") == "keep: me\n"

        result = CliRunner().invoke(cli, ["init-config", "--out", str(out), "--force"])
        assert result.exit_code == 0
        assert "Cooperative Assessment Configuration" in out.read_text(encoding="utf-8")

    def test_config_option_changes_thresholds(self, tmp_path, answers_file, taxonomy_file):
        config = tmp_path / "assessment-config.yaml"
        config.write_text("recommendations:\n  low_tier_max: 3.0\n", encoding="utf-8")

        result = CliRunner().invoke(cli, [
            "--config", str(config),
            "assess", "-a", str(answers_file), "-t", str(taxonomy_file), "-j",
        ])
        assert result.exit_code == 0, result.output
        recommendations = json.loads(result.output)["recommendations"]
        assert recommendations[0] == "Diagnostic Marketing - Digital: Marketing low"

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output
