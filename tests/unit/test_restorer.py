"""Tests for formatting restoration of machine-translated text."""

from doctrans.translation.restorer import (
    is_separator_row,
    restore_formatting,
    restore_special_tokens,
    restore_table_line,
)


class TestTableRestoration:
    def test_separator_rebuilt_from_original(self):
        original = "| A | B |\n|---|---|\n| x | y |"
        translated = "| أ | ب |\n---\n| س | ص |"

        restored = restore_formatting(original, translated)

        assert restored.split("\n") == ["| أ | ب |", "|---|---|", "| س | ص |"]

    def test_separator_keeps_original_dash_widths_and_alignment(self):
        original = "|:-----|------:|"
        assert restore_table_line(original, "|--|--|") == "|:-----|------:|"

    def test_cells_padded_to_widest_text(self):
        restored = restore_table_line("| Name | Age |", "| Nombre | Edad |")
        assert restored == "| Nombre | Edad |"

        restored = restore_table_line("| Description | X |", "| Desc | Y |")
        assert restored == f"| {'Desc'.ljust(11)} | Y |"

    def test_lost_pipes_redistribute_words_across_columns(self):
        restored = restore_table_line(
            "| first cell | second cell |", "premier cellule deuxième cellule"
        )
        assert restored.count("|") == 3
        cells = [c.strip() for c in restored.strip("|").split("|")]
        assert cells == ["premier cellule", "deuxième cellule"]

    def test_non_table_lines_untouched(self):
        assert restore_table_line("plain text", "texte simple") == "texte simple"
        assert restore_table_line("| a | b |", "   ") == "   "

    def test_indent_preserved(self):
        assert restore_table_line("  | a |", "| b |") == "  | b |"

    def test_is_separator_row(self):
        assert is_separator_row("|---|:---:|")
        assert is_separator_row("--- | ---")
        assert not is_separator_row("| a | b |")
        assert not is_separator_row("-----")


class TestSpecialTokens:
    def test_dates_restored_positionally(self):
        original = "Issued 12/05/2024, valid until 01.06.2030"
        translated = "Délivré 5/12/2024, valable jusqu'au 1/6/2030"
        assert (
            restore_special_tokens(original, translated)
            == "Délivré 12/05/2024, valable jusqu'au 01.06.2030"
        )

    def test_page_markers_restored(self):
        assert restore_special_tokens("Page 1 of 3", "page 1 OF 3") == "Page 1 of 3"

    def test_separator_lines_restored(self):
        original = "Header\n==========\nBody"
        translated = "Kopf\n===\nInhalt"
        assert restore_special_tokens(original, translated) == "Kopf\n==========\nInhalt"

    def test_extra_tokens_in_translation_are_kept(self):
        assert restore_special_tokens("on 2024-01-02", "le 2024-01-02 et 2024-03-04") == (
            "le 2024-01-02 et 2024-03-04"
        )


class TestRestoreFormatting:
    def test_empty_inputs_pass_through(self):
        assert restore_formatting("", "x") == "x"
        assert restore_formatting("x", "") == ""

    def test_paragraph_breaks_restored_when_sections_match(self):
        original = "First line\nstill first\n\nSecond"
        translated = "Première ligne encore première\n\n\n\nDeuxième"
        assert restore_formatting(original, translated) == (
            "Première ligne encore première\n\nDeuxième"
        )

    def test_words_spread_over_original_lines_as_last_resort(self):
        original = "one\ntwo\n\nthree\nfour"
        translated = "uno dos tres cuatro"
        assert restore_formatting(original, translated) == "uno\ndos\ntres\ncuatro"

    def test_single_line_original_passes_through(self):
        assert restore_formatting("Hello", "Hola\nmundo") == "Hola\nmundo"
