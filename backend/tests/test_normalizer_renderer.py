from autommr.models import FullExtractedData, MMRHeader, MMRWasteItem
from autommr.services.manifest_pipeline import sections_from_mmr, sections_from_payload
from autommr.services.renderer import items_frame, render_mmr_html, render_sections_html


def _data() -> FullExtractedData:
    return FullExtractedData(
        header=MMRHeader.model_validate({"mmrNo": "027/2025", "gerador": "VALARIS DS-17"}),
        items=[MMRWasteItem.model_validate({"item": "1", "codigo": "A009", "pesoKg": 715})],
    )


class TestNormalizer:

    def test_typed_result_becomes_sections(self):
        sections = sections_from_mmr(_data())
        assert [s.title for s in sections] == ["Dados Gerais do MMR", "Itens de Resíduo - 1"]
        header_fields = {f.topic: f.answer for f in sections[0].fields}
        assert header_fields["MMR N°"] == "027/2025"
        assert header_fields["Poço"] is None
        item_fields = {f.topic: f.answer for f in sections[1].fields}
        assert item_fields["Peso (KG)"] == "715"

    def test_list_of_sections(self):
        sections = sections_from_payload([
            {"title": "A", "fields": [{"topic": "x", "answer": 1}, {"label": "y", "value": None}]},
            "garbage",
        ])
        assert len(sections) == 1
        assert [(f.topic, f.answer) for f in sections[0].fields] == [("x", "1"), ("y", None)]

    def test_mapping_of_sections(self):
        sections = sections_from_payload({"Gerador": {"Nome": "VALARIS"}, "Transporte": {"Navio": "DELTA"}})
        assert [s.title for s in sections] == ["Gerador", "Transporte"]

    def test_flat_object(self):
        sections = sections_from_payload({"MMR": "1", "Itens": [1, 2]})
        assert len(sections) == 1
        assert sections[0].fields[1].answer == "[1, 2]"

    def test_none(self):
        assert sections_from_payload(None) == []


class TestRenderer:

    def test_mmr_tables(self):
        html = render_mmr_html(_data())
        assert "<h3>Dados Gerais do MMR</h3>" in html
        assert "VALARIS DS-17" in html
        assert "A009" in html
        assert html.count("<table") == 2
        assert "N/A" in html

    def test_empty_items_message(self):
        html = render_mmr_html(FullExtractedData())
        assert html.count("<table") == 1
        assert "Nenhum item de resíduo" in html

    def test_items_frame_columns(self):
        frame = items_frame(_data())
        assert list(frame.columns)[:3] == ["Item", "Código", "Tipo de Resíduo"]
        assert frame.iloc[0]["Tipo de Resíduo"] == "N/A"

    def test_sections_are_escaped(self):
        sections = sections_from_payload([{"title": "<b>x</b>", "fields": [{"topic": "t", "answer": "<script>"}]}])
        html = render_sections_html(sections)
        assert "<script>" not in html
        assert "&lt;b&gt;x&lt;/b&gt;" in html

    def test_no_sections(self):
        assert "Nenhum dado" in render_sections_html([])
