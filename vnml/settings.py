"""
XmlSettings - declarative settings objects persisted as XML.

Usage:
    class AppSettings(XmlSettings):
        width = Setting(int, default=800)
        api_key = Setting(str, secure=True)

    settings = AppSettings()
    settings.load("app.xml")
    settings.width = 1024
    settings.save("app.xml")

Document layout:
    <?xml version="1.0" encoding="utf-8"?>
    <settings>
        <setting width="1024" secure="0"/>
        <setting api_key="<ciphertext>" secure="1"/>
    </settings>

Each field is handled on its own: a failure while loading or saving one
setting is passed to ``report_exception_action`` and the remaining
settings are still processed.
"""

from __future__ import annotations

import copy
import logging
import re
from pathlib import Path
from typing import Any, Callable, NamedTuple
from xml.etree import ElementTree as et

from vnml.errors import ConversionError
from vnml.hexbytes import bytes_to_hex, hex_to_bytes

logger = logging.getLogger(__name__)

SETTINGS_TAG = "settings"
SETTING_TAG = "setting"
SECURE_ATTR = "secure"

# Characters XML 1.0 cannot carry, even escaped
_XML_INVALID = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

_UNSET = object()


class TypeConverter(NamedTuple):
    """A pair of functions turning values of one type into text and back."""
    to_string: Callable[[Any], str]
    from_string: Callable[[str], Any]


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"Not a boolean: {text!r}")


# Types converted without a registered or requested converter
PRIMITIVE_CONVERTERS: dict[type, TypeConverter] = {
    str: TypeConverter(str, str),
    int: TypeConverter(str, int),
    float: TypeConverter(repr, float),
    bool: TypeConverter(str, _parse_bool),
    bytes: TypeConverter(bytes_to_hex, hex_to_bytes),
}


class Setting:
    """A persistable field of an ``XmlSettings`` subclass.

    Args:
        type_: Python type of the value. Types outside
            ``PRIMITIVE_CONVERTERS`` need a ``TypeConverter``.
        secure: Pass the text form through the encryption hooks.
        default: Value used when a loaded document lacks this setting.

    Reading a setting that was never assigned nor loaded returns None.
    """

    def __init__(self, type_: type, *, secure: bool = False, default: Any = _UNSET) -> None:
        self.type = type_
        self.secure = secure
        self._default = default
        self.name = ""

    @property
    def has_default(self) -> bool:
        return self._default is not _UNSET

    @property
    def default(self) -> Any:
        return None if self._default is _UNSET else self._default

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.__dict__.get(self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        # An explicit assignment counts as materialized: later loads
        # never replace it with the default.
        instance.__dict__[self.name] = value
        instance._materialized.add(self.name)

    def __repr__(self) -> str:
        return (f"Setting({self.type.__name__}, name={self.name!r}, "
                f"secure={self.secure}, default={self.default!r})")


def _convert(setting_name: str, func: Callable[[Any], Any], value: Any) -> Any:
    try:
        return func(value)
    except (TypeError, ValueError) as e:
        raise ConversionError(setting_name, str(e)) from e


def _find_element(root: et.Element, name: str) -> et.Element | None:
    for element in root.findall(SETTING_TAG):
        if element.get(name) is not None:
            return element
    return None


def write_xml(tree: et.ElementTree, path: str | Path, indent: str = "    ") -> None:
    """Write an XML tree with a declaration, UTF-8, indented."""
    et.indent(tree, indent)
    tree.write(path, encoding="utf-8", xml_declaration=True)


class XmlSettings:
    """Base class of settings objects.

    Subclasses declare their persistable fields as ``Setting`` class
    attributes; they are collected, in declaration order and including
    inherited ones, into the ``__settings__`` table.

    Hooks (all optional, assigned per instance):
        report_exception_action(exc): receives every per-setting failure.
        request_encryption(name, text) -> text: for secure settings on save.
        request_decryption(name, text) -> text: for secure settings on load.
        request_type_converter(name, type) -> TypeConverter | None:
            asked for types that are neither primitive nor registered in
            ``type_converters``.
    """

    __settings__: dict[str, Setting] = {}

    report_exception_action: Callable[[Exception], None] | None = None
    request_encryption: Callable[[str, str], str] | None = None
    request_decryption: Callable[[str, str], str] | None = None
    request_type_converter: Callable[[str, type], TypeConverter | None] | None = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        table: dict[str, Setting] = dict(cls.__settings__)
        for name, value in cls.__dict__.items():
            if isinstance(value, Setting):
                table[name] = value
        cls.__settings__ = table

    def __init__(self) -> None:
        self.type_converters: dict[type, TypeConverter] = {}
        # Names of settings whose default must no longer be applied
        self._materialized: set[str] = set()

    def _report(self, exc: Exception) -> None:
        logger.debug("Setting failure: %s", exc)
        if self.report_exception_action is not None:
            self.report_exception_action(exc)

    def _converter_for(self, setting: Setting) -> TypeConverter | None:
        converter = PRIMITIVE_CONVERTERS.get(setting.type)
        if converter is None:
            converter = self.type_converters.get(setting.type)
        if converter is None and self.request_type_converter is not None:
            converter = self.request_type_converter(setting.name, setting.type)
        return converter

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load_document(self, document: et.ElementTree | et.Element) -> et.ElementTree | et.Element:
        """Assign every setting from an XML settings document.

        Settings missing from the document get their default the first
        time only; converters that cannot be found leave the current value
        in place. Returns the document.
        """
        root = document.getroot() if isinstance(document, et.ElementTree) else document
        for setting in self.__settings__.values():
            try:
                self._load_setting(root, setting)
            except Exception as e:
                self._report(e)
        return document

    def _load_setting(self, root: et.Element, setting: Setting) -> None:
        name = setting.name
        element = _find_element(root, name)
        if element is None:
            if setting.has_default and name not in self._materialized:
                self.__dict__[name] = copy.deepcopy(setting.default)
                self._materialized.add(name)
            return

        value = element.get(name)
        if element.get(SECURE_ATTR) == "1" and self.request_decryption is not None:
            value = self.request_decryption(name, value)

        converter = self._converter_for(setting)
        if converter is None:
            logger.debug("No type converter for %s (%s), value left unchanged",
                         name, setting.type.__name__)
        else:
            self.__dict__[name] = _convert(name, converter.from_string, value)
        self._materialized.add(name)

    def load(self, path: str | Path) -> et.ElementTree | None:
        """Read an XML settings file and load it.

        Returns None if the file cannot be read or parsed; the error goes
        to ``report_exception_action``.
        """
        try:
            tree = et.parse(path)
        except Exception as e:
            self._report(e)
            return None
        self.load_document(tree)
        logger.debug("Loaded settings from %s", path)
        return tree

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save_document(self) -> et.ElementTree:
        """Build an XML settings document from the current values."""
        root = et.Element(SETTINGS_TAG)
        for setting in self.__settings__.values():
            try:
                element = self._save_setting(setting)
            except Exception as e:
                self._report(e)
                continue
            if element is not None:
                root.append(element)
        return et.ElementTree(root)

    def _save_setting(self, setting: Setting) -> et.Element | None:
        name = setting.name
        value = self.__dict__.get(name)
        if value is None and name not in self._materialized and setting.has_default:
            value = copy.deepcopy(setting.default)
            self.__dict__[name] = value
            self._materialized.add(name)
        if value is None:
            return None

        converter = self._converter_for(setting)
        if converter is None:
            raise ConversionError(name, f"no type converter for {setting.type.__name__}")
        text = _convert(name, converter.to_string, value)

        if setting.secure and self.request_encryption is not None:
            text = self.request_encryption(name, text)
        if _XML_INVALID.search(text):
            raise ConversionError(name, "value holds characters not allowed in XML")

        return et.Element(SETTING_TAG, {name: text, SECURE_ATTR: "1" if setting.secure else "0"})

    def save(self, path: str | Path | None = None) -> et.ElementTree:
        """Build the settings document and, given a path, write it there.

        A write failure goes to ``report_exception_action``; the document
        is returned either way.
        """
        tree = self.save_document()
        if path is None:
            return tree
        try:
            write_xml(tree, path)
        except Exception as e:
            self._report(e)
        else:
            logger.debug("Saved settings to %s", path)
        return tree

    def __repr__(self) -> str:
        values = ", ".join(f"{n}={self.__dict__.get(n)!r}" for n in self.__settings__)
        return f"{type(self).__name__}({values})"
