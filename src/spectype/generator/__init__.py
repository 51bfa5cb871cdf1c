"""Generation core -- map schemas, analyse operations, synthesise declarations.

This sub-package takes a :class:`~spectype.models.Document` (produced by the
parser) and builds the ordered declaration lists of the two artifacts: the
type library and the typed client.  It performs no I/O.

Typical usage::

    from spectype.generator import generate
    from spectype.models import GeneratorConfig

    result = generate(document, GeneratorConfig(remove_tag_from_operation_id=True))
    for artifact in result.artifacts:
        print(artifact.filename, len(artifact.declarations))

Sub-modules:

* :mod:`~spectype.generator.type_mapper` -- Schema node to type tree mapping,
  with view filtering and projection wrapping.
* :mod:`~spectype.generator.analyzer` -- Per (path, method, tag) operation
  facts: names, parameter partitions, body, success response.
* :mod:`~spectype.generator.synthesizer` -- Type library and client
  declaration lists.
* :mod:`~spectype.generator.pipeline` -- Runs the above and isolates
  artifact failures.
"""

from spectype.generator.analyzer import analyze_document
from spectype.generator.pipeline import generate
from spectype.generator.type_mapper import map_schema

__all__ = ["analyze_document", "generate", "map_schema"]
