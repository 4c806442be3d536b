"""
Unit tests for CSV and Excel export.
"""

import pandas as pd

from analysis import AnalysisReport
from exporter import save_to_csv, save_to_excel, scored_to_rows, summary_to_rows
from scoring.aggregator import summarize
from scoring.models import OpinionLabel, SecondaryOpinion
from scoring.secondary import BatchVerdict, BatchVerdictLabel


class TestRows:
    """Test cases for row flattening."""

    def test_comment_row(self, make_scored):
        item = make_scored(72, flags=["contains link", "self-promo"], text="visit my channel", likes=4)
        row = scored_to_rows([item])[0]

        assert row["Comment Text"] == "visit my channel"
        assert row["Bot Score"] == 72
        assert row["Suspicious"] is True
        assert row["Flags"] == "contains link | self-promo"
        assert row["AI Score"] == ""
        assert row["AI Label"] == ""

    def test_opinion_columns(self, make_scored):
        item = make_scored(72).with_opinion(SecondaryOpinion(81, OpinionLabel.BOT, "promo"))
        row = scored_to_rows([item])[0]
        assert (row["AI Score"], row["AI Label"], row["AI Reason"]) == (81, "bot", "promo")

    def test_placeholder_opinion(self, make_scored):
        row = scored_to_rows([make_scored(72).with_opinion(SecondaryOpinion.placeholder())])[0]
        assert row["AI Score"] == ""
        assert row["AI Label"] == "uncertain"

    def test_threshold_column(self, make_scored):
        assert scored_to_rows([make_scored(50)], threshold=40)[0]["Suspicious"] is True
        assert scored_to_rows([make_scored(50)], threshold=60)[0]["Suspicious"] is False

    def test_summary_rows(self, make_scored):
        summary = summarize([make_scored(80), make_scored(10)])
        rows = summary_to_rows(summary, "dQw4w9WgXcQ", BatchVerdict(BatchVerdictLabel.MIXED, 55))
        values = {r["Metric"]: r["Value"] for r in rows}
        assert values["Suspicious %"] == 50.0
        assert values["AI Verdict"] == "mixed"
        assert values["AI Confidence"] == 55

    def test_summary_rows_without_verdict(self, make_scored):
        rows = summary_to_rows(summarize([make_scored(80)]))
        assert "AI Verdict" not in {r["Metric"] for r in rows}


class TestFiles:
    """Test cases for files written to disk."""

    def test_csv(self, tmp_path, make_scored):
        path = tmp_path / "comments.csv"
        scored = [
            make_scored(88, flags=["contact bait", "phone number"], text="whatsapp me"),
            make_scored(5, text="Ótima explicação, obrigado!"),
        ]
        assert save_to_csv(scored, str(path)) == str(path)

        with open(path, "rb") as f:
            assert f.read(3) == b"\xef\xbb\xbf"

        df = pd.read_csv(path, encoding="utf-8-sig", keep_default_na=False)
        assert list(df["Bot Score"]) == [88, 5]
        assert df["Flags"][0] == "contact bait | phone number"
        assert df["Comment Text"][1] == "Ótima explicação, obrigado!"

    def test_excel(self, tmp_path, make_scored):
        scored = [make_scored(88, flags=["self-promo"]), make_scored(20)]
        report = AnalysisReport(
            video_id="dQw4w9WgXcQ",
            fetched=2,
            threshold=60,
            summary=summarize(scored),
            comments=scored,
        )
        path = tmp_path / "report.xlsx"
        save_to_excel(report, str(path))

        with pd.ExcelFile(path, engine="openpyxl") as workbook:
            assert workbook.sheet_names == ["Summary", "Comments", "Top Flags"]
            comments = workbook.parse("Comments")
            flags = workbook.parse("Top Flags")
        assert len(comments) == 2
        assert list(flags["Flag"]) == ["self-promo"]
