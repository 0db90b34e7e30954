# quizmend/tests/conftest.py
"""
Pytest configuration and shared fixtures for quizmend tests
"""
from types import SimpleNamespace
from typing import Dict, List

import pytest

from quizmend.config_utils import QuizmendConfig


def multi_select_item(text: str, title: str = None, qtype: str = "Multi-Select") -> str:
    """One D2L <item> with the given question type and escaped HTML text."""
    title_attr = f' title="{title}"' if title is not None else ""
    escaped = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    return f"""
      <item ident="OBJ_1" label="QUES_1"{title_attr}>
        <itemmetadata>
          <qtimetadata>
            <qti_metadatafield>
              <fieldlabel>qmd_questiontype</fieldlabel>
              <fieldentry>{qtype}</fieldentry>
            </qti_metadatafield>
            <qti_metadatafield>
              <fieldlabel>qmd_weighting</fieldlabel>
              <fieldentry>1.0000</fieldentry>
            </qti_metadatafield>
          </qtimetadata>
        </itemmetadata>
        <presentation>
          <flow>
            <material>
              <mattext texttype="text/html">{escaped}</mattext>
            </material>
            <response_lid ident="LID_1" rcardinality="Multiple">
              <render_choice shuffle="yes">
                <flow_label class="Block">
                  <response_label ident="1">
                    <flow_mat><material><mattext texttype="text/html">2</mattext></material></flow_mat>
                  </response_label>
                </flow_label>
              </render_choice>
            </response_lid>
          </flow>
        </presentation>
      </item>"""


def quiz_document(quiz_title: str, *items: str) -> str:
    """A quiz_d2l_*.xml document."""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<questestinterop xmlns:d2l_2p0="http://desire2learn.com/xsd/d2lv2p0">
  <assessment title="{quiz_title}" ident="RES_1">
    <section ident="SECT_1" title="Main">
      {"".join(items)}
    </section>
  </assessment>
</questestinterop>"""


def bank_document(*items: str) -> str:
    """A questiondb.xml document (no assessment, so no quiz title)."""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<questestinterop xmlns:d2l_2p0="http://desire2learn.com/xsd/d2lv2p0">
  <objectbank ident="QDB_1">
    <section ident="SECT_2" title="Chapter 1">
      {"".join(items)}
    </section>
  </objectbank>
</questestinterop>"""


@pytest.fixture
def make_item():
    return multi_select_item


@pytest.fixture
def make_quiz_document():
    return quiz_document


@pytest.fixture
def make_bank_document():
    return bank_document


class FakeExportFile:
    """Stands in for an export file handed over by the host."""

    def __init__(self, name: str, xml: str):
        self.name = name
        self._xml = xml

    def xml(self) -> str:
        return self._xml


@pytest.fixture
def export_file():
    return FakeExportFile


def canvas_question(qid: int, quiz_id: int, name: str, text: str,
                    qtype: str = "multiple_choice_question") -> SimpleNamespace:
    return SimpleNamespace(
        id=qid,
        quiz_id=quiz_id,
        question_type=qtype,
        question_name=name,
        question_text=text,
    )


@pytest.fixture
def make_canvas_question():
    return canvas_question


@pytest.fixture
def mock_canvas(mocker):
    """
    Build a canvasapi.Canvas mock from {(quiz_id, title): [questions]}.

    Usage:
        canvas = mock_canvas({(10, "Quiz 1"): [question, ...]})
    """
    def build(quizzes: Dict[tuple, List[SimpleNamespace]]):
        canvas = mocker.Mock()
        course = mocker.Mock()
        quiz_mocks = []
        for (quiz_id, title), questions in quizzes.items():
            quiz = mocker.Mock()
            quiz.id = quiz_id
            quiz.title = title
            quiz.get_questions.return_value = list(questions)
            quiz_mocks.append(quiz)
        course.get_quizzes.return_value = quiz_mocks
        canvas.get_course.return_value = course
        return canvas
    return build


@pytest.fixture
def config():
    return QuizmendConfig(
        course_id="101",
        api_url="https://canvas.test.edu",
        api_key="test_token_123456",
    )


@pytest.fixture
def mock_put(mocker):
    """Patch the Canvas update call; every PUT succeeds unless told otherwise."""
    def respond(url, headers=None, data=None, timeout=None):
        question_id = int(url.rsplit("/", 1)[-1])
        resp = mocker.Mock()
        resp.raise_for_status.return_value = None
        resp.json.return_value = {
            "id": question_id,
            "question_type": data["question[question_type]"],
        }
        return resp

    return mocker.patch("quizmend.repair.requests.put", side_effect=respond)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep real credentials and config files out of tests"""
    for name in ("COURSE_ID", "CANVAS_API_URL", "CANVAS_API_KEY",
                 "CANVAS_CREDENTIAL_FILE", "QUIZMEND_DRY_RUN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("quizmend.config_utils.GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    monkeypatch.setattr("quizmend.config_utils.DEFAULT_CREDENTIAL_FILE", tmp_path / "no-creds.txt")
