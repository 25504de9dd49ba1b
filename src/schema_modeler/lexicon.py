"""Node kinds and property names used in the node store.

Names are prefixed with ``xs:`` for content taken from an XML Schema document
and ``modeler:`` for bookkeeping written by the modeler itself.
"""

XS_NS = "{http://www.w3.org/2001/XMLSchema}"

# XSD node kinds
SCHEMA_DOCUMENT = "xs:schemaDocument"
IMPORT = "xs:import"
INCLUDE = "xs:include"
REDEFINE = "xs:redefine"
DEPENDENCY_KINDS = frozenset({IMPORT, INCLUDE, REDEFINE})

DECLARATION_KINDS = {
    "element": "xs:elementDeclaration",
    "attribute": "xs:attributeDeclaration",
    "complexType": "xs:complexTypeDefinition",
    "simpleType": "xs:simpleTypeDefinition",
    "group": "xs:modelGroupDefinition",
    "attributeGroup": "xs:attributeGroupDefinition",
}

# XSD properties
SCHEMA_LOCATION = "xs:schemaLocation"
NAMESPACE = "xs:namespace"
TARGET_NAMESPACE = "xs:targetNamespace"
NAME = "xs:name"

# Modeler node kinds
ROOT = "modeler:root"
FOLDER = "modeler:folder"
ARTIFACT = "modeler:artifact"
DEPENDENCIES = "modeler:dependencies"
DEPENDENCY = "modeler:dependency"

# Modeler properties
CONTENT = "modeler:content"
SIZE = "modeler:size"
EXTERNAL_LOCATION = "modeler:externalLocation"
MODEL_TYPE = "modeler:modelType"
ARTIFACT_PATH = "modeler:artifactPath"
SOURCE_REFERENCES = "modeler:sourceReferences"
PATH = "modeler:path"

# Child name of the dependencies container under a model node
DEPENDENCIES_NODE_NAME = "dependencies"
DEPENDENCY_NODE_NAME = "dependency"
