import io
import unittest
import zipfile

from drivegallery.errors import ConversionError
from drivegallery.renderer import MammothRenderer

CONTENT_TYPES = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
  <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
  <Default Extension="xml" ContentType="application/xml"/>
  <Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
</Types>"""

RELS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" Target="word/document.xml"/>
</Relationships>"""

DOCUMENT = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
  <w:body>
    <w:p><w:r><w:t xml:space="preserve">Hello </w:t></w:r><w:r><w:rPr><w:b/></w:rPr><w:t>world</w:t></w:r></w:p>
  </w:body>
</w:document>"""


def build_docx() -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("[Content_Types].xml", CONTENT_TYPES)
        archive.writestr("_rels/.rels", RELS)
        archive.writestr("word/document.xml", DOCUMENT)
    return buffer.getvalue()


class MammothRendererTests(unittest.TestCase):
    def setUp(self):
        self.renderer = MammothRenderer()

    def test_renders_paragraph_html(self):
        rendered = self.renderer.render(build_docx())
        self.assertEqual(rendered.html, "<p>Hello <strong>world</strong></p>")
        self.assertIsInstance(rendered.warnings, list)

    def test_invalid_bytes_raise_conversion_error(self):
        with self.assertRaises(ConversionError):
            self.renderer.render(b"this is not a zip archive")


if __name__ == "__main__":
    unittest.main()
