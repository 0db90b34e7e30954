#!/usr/bin/env python3
"""
extract.py (quizmend)

Pull Multi-Select questions out of D2L export documents.

A D2L quiz export (quiz_d2l_*.xml) looks like:

    <questestinterop>
      <assessment title="Quiz 1" ...>
        <section>
          <item title="Q1" label="QUES_123" ...>
            <itemmetadata>
              <qtimetadata>
                <qti_metadatafield>
                  <fieldlabel>qmd_questiontype</fieldlabel>
                  <fieldentry>Multi-Select</fieldentry>
                </qti_metadatafield>
              </qtimetadata>
            </itemmetadata>
            <presentation>
              <flow><material><mattext texttype="text/html">&lt;p&gt;...</mattext></material></flow>
            </presentation>
            ...

The shared question bank (questiondb.xml) has an <objectbank> instead of an
<assessment>, so it has no quiz title; its records get "Question Database".
"""

from __future__ import annotations

import logging
from typing import Iterable, List, NamedTuple, Optional, Union

from lxml import etree

from quizmend.errors import malformed_document_error, missing_question_text_error
from quizmend.models import QUESTION_DATABASE_TITLE, UNKNOWN_TITLE, QuestionRecord

log = logging.getLogger(__name__)

QUIZ_TITLE_XPATH = "//assessment/@title"

# fieldentry -> qti_metadatafield -> qtimetadata -> itemmetadata -> item
MULTI_SELECT_PRESENTATION_XPATH = (
    '//fieldlabel[text()="qmd_questiontype"]'
    '/../fieldentry[text()="Multi-Select"]'
    '/../../../../presentation'
)

QUESTION_TEXT_XPATH = "(.//mattext[normalize-space()])[1]"

ITEM_TAG = "item"


class ItemTitle(NamedTuple):
    """Result of looking for the title of the item enclosing a node."""
    found: bool
    title: Optional[str] = None

    @classmethod
    def not_found(cls) -> "ItemTitle":
        return cls(False)


def _make_parser() -> etree.XMLParser:
    # Export files are untrusted input
    return etree.XMLParser(resolve_entities=False, no_network=True)


def parse_document(xml: Union[str, bytes], index: int = 0) -> etree._Element:
    """
    Parse one export document.

    Raises:
        ParseError: If the document is not well-formed
    """
    # Bytes go to lxml untouched so the XML declaration picks the encoding
    data = xml.encode("utf-8") if isinstance(xml, str) else xml
    try:
        return etree.fromstring(data, _make_parser())
    except (etree.XMLSyntaxError, ValueError) as e:
        raise malformed_document_error(index, cause=e) from e


def find_quiz_title(root: etree._Element) -> str:
    """The assessment title, or "Question Database" when absent or empty."""
    titles = root.xpath(QUIZ_TITLE_XPATH)
    title = str(titles[0]) if titles else ""
    return title or QUESTION_DATABASE_TITLE


def find_item_title(node: etree._Element) -> ItemTitle:
    """
    Walk up from node to the nearest enclosing <item> and read its title.

    Only the first <item> counts: if it has no title the search stops there.
    """
    for ancestor in node.iterancestors():
        if ancestor.tag != ITEM_TAG:
            continue
        title = ancestor.get("title")
        if title:
            return ItemTitle(True, title)
        return ItemTitle.not_found()
    return ItemTitle.not_found()


def find_question_text(presentation: etree._Element) -> Optional[str]:
    matches = presentation.xpath(QUESTION_TEXT_XPATH)
    if not matches:
        return None
    return "".join(matches[0].itertext())


def extract_document(xml: Union[str, bytes], index: int = 0) -> List[QuestionRecord]:
    """
    Records for every Multi-Select question in one export document.

    Raises:
        ParseError: If the document is not well-formed
        ElementLookupError: If a Multi-Select item has no presentation text
    """
    root = parse_document(xml, index)
    quiz_title = find_quiz_title(root)

    records: List[QuestionRecord] = []
    for presentation in root.xpath(MULTI_SELECT_PRESENTATION_XPATH):
        item_title = find_item_title(presentation)
        question_title = item_title.title if item_title.found else UNKNOWN_TITLE

        question_text = find_question_text(presentation)
        if question_text is None:
            raise missing_question_text_error(quiz_title, question_title)

        records.append(QuestionRecord(quiz_title, question_title, question_text,
                                      has_title=item_title.found))
        log.debug("[extract]   '%s' / '%s'", quiz_title, question_title)

    return records


def extract_records(documents: Iterable[Union[str, bytes]]) -> List[QuestionRecord]:
    """
    Multi-Select records from every document, in document order.

    Any malformed document aborts the whole extraction.
    """
    records: List[QuestionRecord] = []
    for index, xml in enumerate(documents):
        found = extract_document(xml, index)
        if found:
            log.info("[extract] Document #%d: %d multi-select question(s) in '%s'",
                     index, len(found), found[0].quiz_title)
        records.extend(found)

    log.info("[extract] Found %d multi-select question(s)", len(records))
    return records
