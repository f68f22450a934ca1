"""
Timed-text XML parser.

Splits a YouTube timed-text payload (``<transcript><text start=".." dur="..">``)
into caption cues. Parsing is regex based rather than XML based: upstream
payloads are not always well formed, and a single bad cue must never abort
the whole document.
"""

import json
import logging
import re
from typing import Any, Dict, List

from ..models import CaptionCue
from ..utils import normalize_caption_text

logger = logging.getLogger(__name__)

_XML_DECLARATION_PATTERN = re.compile(r'<\?xml[^>]*\?>')
_TRANSCRIPT_ENVELOPE_PATTERN = re.compile(r'</?transcript[^>]*>')
_START_PATTERN = re.compile(r'start="([\d.]+)"')
_DUR_PATTERN = re.compile(r'dur="([\d.]+)"')

CUE_DELIMITER = '</text>'


def parse_caption_xml(xml_text: str) -> List[CaptionCue]:
    """
    Parse timed-text XML into an ordered list of caption cues.

    Fragments without both a ``start`` and a ``dur`` attribute are skipped
    (logged as warnings), leaving a gap instead of a zero-timed cue.

    Args:
        xml_text: Raw timed-text XML payload

    Returns:
        List of CaptionCue objects in source order

    Example:
        >>> xml = '<transcript><text start="0.5" dur="1.2">Hi</text></transcript>'
        >>> parse_caption_xml(xml)
        [CaptionCue(start=0.5, dur=1.2, text='Hi')]
    """
    if not xml_text:
        return []

    body = _XML_DECLARATION_PATTERN.sub('', xml_text, count=1)
    body = _TRANSCRIPT_ENVELOPE_PATTERN.sub('', body)

    cues: List[CaptionCue] = []
    skipped = 0

    for fragment in body.split(CUE_DELIMITER):
        if not fragment.strip():
            continue

        start_match = _START_PATTERN.search(fragment)
        dur_match = _DUR_PATTERN.search(fragment)

        if not start_match or not dur_match:
            logger.warning(f"Failed to extract start or duration from line: {fragment[:200]}")
            skipped += 1
            continue

        try:
            start = float(start_match.group(1))
            dur = float(dur_match.group(1))
        except ValueError:
            # "1.2.3" matches [\d.]+ but is not a number
            logger.warning(f"Invalid start or duration in line: {fragment[:200]}")
            skipped += 1
            continue

        cues.append(CaptionCue(start=start, dur=dur, text=normalize_caption_text(fragment)))

    if skipped:
        logger.debug(f"Skipped {skipped} malformed cues, kept {len(cues)}")

    return cues


class TimedTextParser:
    """
    Parser for converting timed-text XML files to a cues JSON document.

    Wraps :func:`parse_caption_xml` with file I/O for offline processing of
    previously downloaded payloads.
    """

    def parse_file(self, xml_file: str) -> List[CaptionCue]:
        """
        Parse a timed-text XML file.

        Args:
            xml_file: Path to the XML payload

        Returns:
            List of CaptionCue objects
        """
        logger.info(f"Parsing timed-text file: {xml_file}")
        with open(xml_file, 'r', encoding='utf-8') as f:
            return parse_caption_xml(f.read())

    def parse_to_json(self, xml_file: str, output_file: str = "captions.json") -> Dict[str, Any]:
        """
        Parse a timed-text XML file and write the cues as JSON.

        Args:
            xml_file: Path to the XML payload
            output_file: Output filename (default: "captions.json")

        Returns:
            Dictionary containing:
                - captions_path: Path to the saved JSON file
                - cues_count: Number of cues extracted
        """
        cues = self.parse_file(xml_file)

        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump([cue.to_dict() for cue in cues], f, indent=2, ensure_ascii=False)

        logger.info(f"Timed-text parsing complete: {len(cues)} cues extracted")

        return {
            "captions_path": output_file,
            "cues_count": len(cues),
        }
