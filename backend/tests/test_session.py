from autommr.config import Config
from autommr.services import session as session_module
from autommr.services.session import ExtractionMode, ExtractionSession, SessionManager


def test_successful_extraction_updates_counters(mmr_provider, counters, png_bytes):
    session = ExtractionSession()
    assert session.select_file("mmr.png", "image/png", png_bytes)

    assert session.process(counters, provider=mmr_provider)
    assert session.error is None
    assert session.is_loading is False
    assert len(session.extracted_data.items) == 2
    assert session.sections[0].title == "Dados Gerais do MMR"
    assert counters.get_stats() == {'documents_processed': 1, 'minutes_saved': 15}


def test_unsupported_file_keeps_previous_result(mmr_provider, counters, png_bytes, make_provider, monkeypatch):
    session = ExtractionSession()
    session.select_file("mmr.png", "image/png", png_bytes)
    session.process(counters, provider=mmr_provider)
    previous = session.extracted_data
    previous_documents = list(session.documents)

    watcher = make_provider([])
    monkeypatch.setattr(session_module, "get_provider", lambda: watcher)
    assert not session.select_file("notes.txt", "text/plain", b"hello")

    assert session.error.startswith("Please select an image file")
    assert session.extracted_data is previous
    assert session.documents == previous_documents
    assert session.file_name == "mmr.png"
    assert watcher.calls == []


def test_new_selection_clears_previous_result(mmr_provider, counters, png_bytes, jpeg_bytes):
    session = ExtractionSession()
    session.select_file("mmr.png", "image/png", png_bytes)
    session.process(counters, provider=mmr_provider)

    assert session.select_file("other.jpg", "image/jpeg", jpeg_bytes)
    assert session.extracted_data is None
    assert session.sections == []
    assert session.file_name == "other.jpg"


def test_process_without_selection(counters, mmr_provider):
    session = ExtractionSession()
    assert not session.process(counters, provider=mmr_provider)
    assert session.error == "Please select a file first."
    assert mmr_provider.calls == []


def test_parse_failure_is_reported_and_not_counted(make_provider, counters, png_bytes):
    session = ExtractionSession()
    session.select_file("mmr.png", "image/png", png_bytes)

    assert not session.process(counters, provider=make_provider(["not json at all"]))
    assert session.error.startswith("Failed to parse the model's JSON response.")
    assert session.extracted_data is None
    assert counters.get_stats()['documents_processed'] == 0


def test_missing_api_key_is_reported(monkeypatch, counters, png_bytes):
    monkeypatch.setattr(Config, "EXTRACTION_PROVIDER", "gemini")
    monkeypatch.setattr(Config, "GEMINI_API_KEY", None)
    session = ExtractionSession()
    session.select_file("mmr.png", "image/png", png_bytes)

    assert not session.process(counters)
    assert session.error == "Server configuration error: API key is missing."


def test_default_provider_is_built_from_config(monkeypatch, mmr_provider, counters, png_bytes):
    monkeypatch.setattr(session_module, "get_provider", lambda: mmr_provider)
    session = ExtractionSession()
    session.select_file("mmr.png", "image/png", png_bytes)
    assert session.process(counters)
    assert len(mmr_provider.calls) == 2


def test_sections_mode(make_provider, counters, png_bytes):
    session = ExtractionSession()
    session.select_file("form.png", "image/png", png_bytes)
    provider = make_provider(['{"Dados": {"Nome": "X"}}'])

    assert session.process(counters, mode=ExtractionMode.SECTIONS, provider=provider)
    assert session.extracted_data is None
    assert session.sections[0].fields[0].answer == "X"


def test_rotate_page(png_bytes):
    session = ExtractionSession()
    session.select_file("mmr.png", "image/png", png_bytes)
    rotated = session.rotate_page(1, 90)
    assert session.documents[0] is rotated
    assert rotated.mime_type == "image/jpeg"


def test_state_and_manager(png_bytes):
    manager = SessionManager()
    session = manager.create()
    session.select_file("mmr.png", "image/png", png_bytes)

    state = session.to_state()
    assert state.documents[0].file_name == "mmr.png"
    assert manager.get(session.session_id) is session
    assert len(manager) == 1
    assert manager.delete(session.session_id)
    assert manager.get(session.session_id) is None
