"""XML codec for binding instances.

Maps binding models to lxml elements and back, driven by the field aliases
and the ``xml_*`` class variables of the binding module. Element order
follows field declaration order, which mirrors the XSD sequence.
"""

from __future__ import annotations

import copy
import logging
import types
from typing import Any

from lxml import etree
from pydantic import BaseModel

from . import premis_v3
from .introspect import binding_classes, field_shape
from .premis_v3 import BoundElement

logger = logging.getLogger(__name__)

XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
XSI_TYPE = f"{{{XSI_NS}}}type"


class BindingCodec:
    """Converts between binding instances and lxml elements."""

    def __init__(
        self,
        bindings: types.ModuleType = premis_v3,
        namespace: str | None = None,
        prefix: str = "premis",
    ):
        self.bindings = bindings
        self.namespace = namespace or getattr(bindings, "PREMIS_NS", premis_v3.PREMIS_NS)
        self.prefix = prefix
        self.nsmap = {prefix: self.namespace, "xsi": XSI_NS}
        self._xsi_types = {
            cls.xsi_type: cls
            for cls in binding_classes(bindings)
            if getattr(cls, "xsi_type", None)
        }
        self._parser = etree.XMLParser(
            resolve_entities=False, no_network=True, remove_blank_text=True
        )

    def qname(self, local_name: str) -> str:
        return f"{{{self.namespace}}}{local_name}"

    # ── encoding ──

    def to_element(
        self,
        instance: BaseModel,
        local_name: str | None = None,
        nsmap: dict[str | None, str] | None = None,
    ) -> etree._Element:
        """Encode an instance as a standalone element."""
        name = local_name or getattr(type(instance), "xml_name", "") or "element"
        element = etree.Element(self.qname(name), nsmap=nsmap or self.nsmap)
        self._fill(element, instance)
        return element

    def _fill(self, element: etree._Element, instance: BaseModel) -> None:
        cls = type(instance)
        xsi_type = getattr(cls, "xsi_type", None)
        if xsi_type:
            element.set(XSI_TYPE, f"{self.prefix}:{xsi_type}")

        text_field = getattr(cls, "xml_text", None)
        attributes = getattr(cls, "xml_attributes", ())
        wildcard = getattr(cls, "xml_wildcard", None)

        for field_name, info in cls.model_fields.items():
            value = getattr(instance, field_name)
            if value is None:
                continue
            alias = info.alias or field_name
            if field_name in attributes:
                element.set(alias, str(value))
            elif field_name == text_field:
                element.text = str(value)
            elif field_name == wildcard:
                for item in value:
                    self._append_wildcard(element, item)
            else:
                items = value if isinstance(value, list) else [value]
                for item in items:
                    if item is not None:
                        self._append_value(element, alias, item)

    def _append_value(self, parent: etree._Element, alias: str, value: Any) -> None:
        if isinstance(value, BoundElement):
            value = value.value
        child = etree.SubElement(parent, self.qname(alias))
        if isinstance(value, BaseModel):
            self._fill(child, value)
        elif isinstance(value, bool):
            child.text = "true" if value else "false"
        else:
            child.text = str(value)

    def _append_wildcard(self, parent: etree._Element, item: Any) -> None:
        if isinstance(item, etree._Element):
            parent.append(copy.deepcopy(item))
        elif isinstance(item, BoundElement):
            child = etree.SubElement(parent, f"{{{item.namespace}}}{item.name}")
            if isinstance(item.value, BaseModel):
                self._fill(child, item.value)
            elif isinstance(item.value, etree._Element):
                child.append(copy.deepcopy(item.value))
            elif item.value is not None:
                child.text = str(item.value)
        else:
            logger.debug("Skipping wildcard item of type %s", type(item).__name__)

    # ── decoding ──

    def from_element(self, element: etree._Element, target_type: type[BaseModel]) -> BaseModel:
        """Decode an element into ``target_type`` (or the subtype named by xsi:type).

        Raises:
            TypeError / ValueError: if the element cannot populate the type
                (e.g. an abstract type without an xsi:type).
        """
        cls = self._resolve_type(element, target_type)
        fields = cls.model_fields
        by_alias = {(info.alias or name): name for name, info in fields.items()}
        text_field = getattr(cls, "xml_text", None)
        wildcard = getattr(cls, "xml_wildcard", None)
        data: dict[str, Any] = {}

        for name in getattr(cls, "xml_attributes", ()):
            raw = element.get(fields[name].alias or name)
            if raw is not None:
                data[name] = _coerce(raw, field_shape(fields[name].annotation)[1])

        if text_field and element.text is not None and element.text.strip():
            shape = field_shape(fields[text_field].annotation)[1]
            data[text_field] = _coerce(element.text.strip(), shape)

        for child in element:
            if not isinstance(child.tag, str):
                continue
            local = etree.QName(child).localname
            field_name = by_alias.get(local)
            if field_name is None or field_name == wildcard:
                if wildcard:
                    data.setdefault(wildcard, []).append(self._wildcard_item(child))
                else:
                    logger.debug("Ignoring <%s> inside %s", local, cls.__name__)
                continue
            repeated, element_type = field_shape(fields[field_name].annotation)
            value = self._decode(child, element_type)
            if repeated:
                data.setdefault(field_name, []).append(value)
            else:
                data[field_name] = value

        return cls(**data)

    def parse_fragment(self, xml: str | bytes, target_type: type[BaseModel]) -> BaseModel:
        """Parse a document fragment and decode its root into ``target_type``."""
        if isinstance(xml, str):
            xml = xml.encode("utf-8")
        return self.from_element(etree.fromstring(xml, parser=self._parser), target_type)

    def _resolve_type(
        self, element: etree._Element, target_type: type[BaseModel]
    ) -> type[BaseModel]:
        declared = element.get(XSI_TYPE)
        if declared:
            subtype = self._xsi_types.get(declared.rpartition(":")[2])
            if subtype is not None and issubclass(subtype, target_type):
                return subtype
        return target_type

    def _decode(self, element: etree._Element, element_type: type | None) -> Any:
        if element_type is not None and issubclass(element_type, BaseModel):
            return self.from_element(element, element_type)
        text = (element.text or "").strip()
        return _coerce(text, element_type)

    def _wildcard_item(self, element: etree._Element) -> BoundElement:
        qname = etree.QName(element)
        if len(element):
            value: Any = copy.deepcopy(element[0])
        else:
            value = (element.text or "").strip()
        return BoundElement(qname.localname, value, qname.namespace or self.namespace)


def _coerce(text: str, target: type | None) -> Any:
    if target is int:
        return int(text)
    if target is bool:
        return text.lower() in ("true", "1")
    return text
