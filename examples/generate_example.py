"""Generate an example .vnml file to see what the format looks like."""

import sys
sys.path.insert(0, str(__import__("pathlib").Path(__file__).parent.parent))

from vnml.document import VNmlDocument

doc = VNmlDocument(namespace="editor")

doc["window", "width"] = 1280
doc["window", "height"] = 720
doc["window", "maximized"] = False
doc.set_comment("window", None, "Main window geometry, restored on start")
doc.set_comment("window", "width", "in pixels")

doc["recent", "file1"] = "C:\\Users\\me\\notes.txt"
doc["recent", "file2"] = "C:\\Users\\me\\todo.txt"

doc["layout", "BIN:dock_state"] = bytes([0x00, 0x01, 0x7F, 0xFF])
doc.set_comment("layout", "BIN:dock_state", "opaque toolkit state, hex encoded")

# Write the example
output = str(__import__("pathlib").Path(__file__).parent / "hello.vnml")
nbytes = doc.save(output)
print(f"Generated {output} ({nbytes} bytes)")

# Also print the raw content so you can see the format
print()
print("=" * 60)
print("RAW .vnml FILE CONTENTS:")
print("=" * 60)
print()
print(doc.dumps())
