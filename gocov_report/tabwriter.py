"""Column alignment for tab-separated text.

Usage:
    tw = TabWriter(sys.stdout)
    tw.write("pkg/a.go:3\t f1\t 50.00% (2/4)\n")
    tw.flush()

Text is buffered until ``flush()``. Every tab-terminated cell belongs to a
column; the last cell of a line does not. Column widths are computed once
over *all* buffered lines, so blank lines do not reset the alignment.

With the default ``padchar`` of ``"\\t"`` the column width is rounded up to a
multiple of ``tabwidth`` and cells are padded with tab characters, which
keeps the output aligned on any terminal using the same tab width.
"""

from typing import TextIO


class TabWriter:
    def __init__(
        self,
        stream: TextIO,
        minwidth: int = 0,
        tabwidth: int = 8,
        padding: int = 0,
        padchar: str = "\t",
    ) -> None:
        if len(padchar) != 1:
            raise ValueError("padchar must be a single character.")
        self._stream = stream
        self._minwidth = minwidth
        self._tabwidth = tabwidth
        self._padding = padding
        self._padchar = padchar
        self._buffer: list[str] = []

    def write(self, text: str) -> int:
        self._buffer.append(text)
        return len(text)

    def flush(self) -> None:
        """Align the buffered text and write it to the underlying stream."""
        text = "".join(self._buffer)
        self._buffer = []
        if not text:
            return
        self._stream.write(self.format(text))
        if hasattr(self._stream, "flush"):
            self._stream.flush()

    def format(self, text: str) -> str:
        lines = text.split("\n")
        rows = [line.split("\t") for line in lines]
        widths = self._column_widths(rows)

        out: list[str] = []
        for cells in rows:
            parts: list[str] = []
            for i, cell in enumerate(cells[:-1]):
                parts.append(cell + self._pad(len(cell), widths[i]))
            parts.append(cells[-1])
            out.append("".join(parts))
        return "\n".join(out)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _column_widths(self, rows: list[list[str]]) -> list[int]:
        widths: list[int] = []
        for cells in rows:
            for i, cell in enumerate(cells[:-1]):
                w = len(cell) + self._padding
                if i == len(widths):
                    widths.append(max(self._minwidth, w))
                elif w > widths[i]:
                    widths[i] = w
        return widths

    def _pad(self, textw: int, cellw: int) -> str:
        if self._padchar != "\t":
            return self._padchar * (cellw - textw)
        if self._tabwidth == 0:
            return ""
        # round the cell up to the next tab stop
        cellw = (cellw + self._tabwidth - 1) // self._tabwidth * self._tabwidth
        n = cellw - textw
        return "\t" * ((n + self._tabwidth - 1) // self._tabwidth)
