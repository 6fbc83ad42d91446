"""Manual page resolution and rendering.

- ``pages``: the ``PageRef`` value type and URL helpers
- ``store``: read-only access to the gzip corpus
- ``resolver``: bare name to section (suffix parsing, priority probing)
- ``formatter``: ``mandoc`` adapter and the HTML document shell
- ``pipeline``: conditional GET, ``.so`` aliases, rendering
- ``routes``: the two URL shapes wired onto an ``App``
"""
