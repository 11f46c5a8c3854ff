from __future__ import annotations

import textwrap
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from sscexport.errors import ScoreFormatError
from sscexport.musicxml import parse_musicxml_timing


MUSICXML = textwrap.dedent(
    """\
    <?xml version="1.0" encoding="UTF-8"?>
    <!DOCTYPE score-partwise PUBLIC "-//Recordare//DTD MusicXML 3.1 Partwise//EN"
      "http://www.musicxml.org/dtds/partwise.dtd">
    <score-partwise version="3.1">
      <part-list>
        <score-part id="P1"><part-name>Lead</part-name></score-part>
      </part-list>
      <part id="P1">
        <measure number="1">
          <attributes>
            <divisions>1</divisions>
            <time><beats>4</beats><beat-type>4</beat-type></time>
          </attributes>
          <direction placement="above">
            <direction-type>
              <metronome><beat-unit>quarter</beat-unit><per-minute>120</per-minute></metronome>
            </direction-type>
            <sound tempo="120"/>
          </direction>
          <note><pitch><step>C</step><octave>4</octave></pitch><duration>4</duration><type>whole</type></note>
        </measure>
        <measure number="2">
          <attributes>
            <time><beats>3</beats><beat-type>4</beat-type></time>
          </attributes>
          <direction placement="above">
            <direction-type>
              <metronome><beat-unit>quarter</beat-unit><per-minute>90</per-minute></metronome>
            </direction-type>
            <sound tempo="90"/>
          </direction>
          <note><pitch><step>D</step><octave>4</octave></pitch><duration>3</duration><type>half</type><dot/></note>
        </measure>
      </part>
    </score-partwise>
    """
)


class TestMusicXmlTiming(unittest.TestCase):
    def test_tempo_and_signatures_converted_to_ticks(self) -> None:
        with TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "song.musicxml"
            path.write_text(MUSICXML, encoding="utf-8")
            events = parse_musicxml_timing(path, ticks_per_beat=480)
        self.assertEqual(
            [(change.tick, change.bpm) for change in events.bpm_changes],
            [(0, 120.0), (1920, 90.0)],
        )
        self.assertEqual(
            [(change.tick, str(change)) for change in events.time_signature_changes],
            [(0, "4/4"), (1920, "3/4")],
        )

    def test_malformed_file_raises_score_format_error(self) -> None:
        with TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "broken.musicxml"
            path.write_text("<score-partwise><part>", encoding="utf-8")
            with self.assertRaises(ScoreFormatError):
                parse_musicxml_timing(path, ticks_per_beat=480)

    def test_rejects_non_positive_resolution(self) -> None:
        with self.assertRaises(ValueError):
            parse_musicxml_timing("unused.musicxml", ticks_per_beat=0)


if __name__ == "__main__":
    unittest.main()
