"""
VNml - hierarchical, namespaced, comment-preserving configuration files,
plus declarative XML settings objects.
"""

__version__ = "1.0.0"
__format_version__ = "1.0"

from vnml.spec import CURRENT_BANNER, VERSION_BANNERS, BIN_PREFIX
from vnml.errors import FormatError, ConversionError
from vnml.document import VNmlDocument, VNmlSection, VNmlValue
from vnml.reader import VNmlReader
from vnml.writer import VNmlWriter
from vnml.settings import XmlSettings, Setting, TypeConverter
