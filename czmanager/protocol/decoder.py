"""
Recursive-descent decoder for CZ request-shaped SysEx messages.

Grammar:

    node      := start | parameter | unknown
    start     := F0 ID SUB1 SUB2 CHANNEL node* F7
    parameter := <declared opcode> VALUE
    unknown   := <any other byte>

A start block reads a four byte envelope, then decodes child nodes until it
meets the F7 that closes it. Children may themselves be start blocks; the
decoder keeps a stack of open blocks instead of recursing, so nesting depth is
only bounded by the input length. Each call works on an immutable buffer plus
an explicit offset and returns the offset after the last byte it consumed,
which lets a caller keep parsing sibling messages from the same buffer.

Unknown opcodes decode permissively as bare leaves. Only structural faults
(truncation, a terminator with nothing to close, leftover bytes) are errors,
and an error always aborts the whole decode.

Responses from the device do not repeat the operation code that produced
them, so this grammar cannot select a parser for them. There is intentionally
no decode_response here.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, NamedTuple, Optional, Tuple, Union

from czmanager.errors import TrailingData, TruncatedMessage, UnmatchedTerminator
from czmanager.protocol.tags import SYSEX_END, SYSEX_START, UNKNOWN, TagTable

logger = logging.getLogger(__name__)

ENVELOPE_SIZE = 4

BytesLike = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class Envelope:
    """
    Fixed header following a start marker.

    Attributes:
        device_id: Manufacturer/device identifier
        sub1: First sub-identifier
        sub2: Second sub-identifier
        channel_byte: Raw channel byte; low nibble is the channel, high nibble
            is reserved and kept only so the frame can be re-encoded
    """

    device_id: int
    sub1: int
    sub2: int
    channel_byte: int

    @property
    def channel(self) -> int:
        return self.channel_byte & 0x0F

    @property
    def flags(self) -> int:
        return self.channel_byte & 0xF0

    def to_bytes(self) -> bytes:
        return bytes([self.device_id, self.sub1, self.sub2, self.channel_byte])


@dataclass
class DecodedNode:
    """
    One decoded opcode and everything it encloses.

    Start nodes carry an envelope, their children and the terminator node that
    closed them. Parameter nodes carry the data byte that followed the opcode.
    Unknown and terminator nodes are bare leaves.
    """

    tag: str
    opcode: int
    depth: int = 0
    offset: int = 0
    value: Optional[int] = None
    envelope: Optional[Envelope] = None
    children: List["DecodedNode"] = field(default_factory=list)
    terminator: Optional["DecodedNode"] = None

    @property
    def is_block(self) -> bool:
        return self.opcode == SYSEX_START

    @property
    def is_leaf(self) -> bool:
        return not self.is_block

    def leaves(self) -> Iterator["DecodedNode"]:
        """Yield every non-block node below this one, terminators excluded."""
        stack = list(reversed(self.children))
        while stack:
            child = stack.pop()
            if child.is_block:
                stack.extend(reversed(child.children))
            else:
                yield child

    def find(self, tag: str) -> Optional["DecodedNode"]:
        """Return the first node with the given tag (depth-first), if any."""
        stack = [self]
        while stack:
            node = stack.pop()
            if node.tag == tag:
                return node
            stack.extend(reversed(node.children))
        return None


class TraceRecord(NamedTuple):
    """One line of diagnostic output: symbol, raw byte and nesting depth."""

    symbol: str
    byte: int
    depth: int

    def format(self, indent: str = " ") -> str:
        return f"{indent * self.depth}{self.symbol} (0x{self.byte:02x})"


class SysexDecoder:
    """
    Decoder for CZ request-shaped SysEx data.

    Example:
        decoder = SysexDecoder()
        node = decoder.decode_request(bytes.fromhex("F0 40 00 00 00 4C 01 F7"))
        for record in decoder.trace(node):
            print(record.format())
    """

    def __init__(self, tags: Optional[TagTable] = None):
        self.tags = tags if tags is not None else TagTable.default()

    def decode_request(self, data: BytesLike) -> DecodedNode:
        """
        Decode a buffer holding exactly one request.

        Raises:
            TruncatedMessage: If the buffer ends inside the request
            UnmatchedTerminator: If a stray F7 follows (or starts) the request
            TrailingData: If any other bytes follow the request
        """
        data = bytes(data)
        node, end = self.decode_at(data)
        if end < len(data):
            if data[end] == SYSEX_END:
                raise UnmatchedTerminator("Terminator with no open block", end)
            raise TrailingData(f"{len(data) - end} byte(s) after request", end)
        return node

    def decode_all(self, data: BytesLike) -> List[DecodedNode]:
        """Decode every consecutive message in a buffer (e.g. a .syx file)."""
        return list(self.iter_messages(data))

    def iter_messages(self, data: BytesLike) -> Iterator[DecodedNode]:
        data = bytes(data)
        offset = 0
        while offset < len(data):
            node, offset = self.decode_at(data, offset)
            yield node

    def decode_at(
        self, data: BytesLike, offset: int = 0, end: Optional[int] = None
    ) -> Tuple[DecodedNode, int]:
        """
        Decode one node starting at offset.

        Args:
            data: Buffer to read from
            offset: Position of the opcode to decode
            end: Exclusive read limit (defaults to, and is capped at,
                len(data)); no byte at or past this position is ever read

        Returns:
            (node, next_offset) where next_offset is just past the last byte
            consumed
        """
        end = len(data) if end is None else min(end, len(data))
        if offset >= end:
            raise TruncatedMessage("Expected an opcode but input ended", offset)
        if data[offset] == SYSEX_END:
            raise UnmatchedTerminator("Terminator with no open block", offset)
        return self._decode_node(data, offset, end)

    def _decode_node(self, data: BytesLike, offset: int, end: int) -> Tuple[DecodedNode, int]:
        root, offset = self._read_opcode(data, offset, end, 0)
        if not root.is_block:
            return root, offset

        # Open start blocks, innermost last
        offset = self._read_envelope(root, data, offset, end)
        open_blocks = [root]

        while open_blocks:
            block = open_blocks[-1]
            if offset >= end:
                raise TruncatedMessage(
                    f"Input ended before the terminator of block at {block.offset}", end
                )

            if data[offset] == SYSEX_END:
                block.terminator = DecodedNode(
                    tag=self.tags.symbol(SYSEX_END),
                    opcode=SYSEX_END,
                    depth=block.depth,
                    offset=offset,
                )
                logger.debug("%s%s (0x%02x)", " " * block.depth, block.terminator.tag, SYSEX_END)
                open_blocks.pop()
                offset += 1
                continue

            child, offset = self._read_opcode(data, offset, end, block.depth + 2)
            block.children.append(child)
            if child.is_block:
                offset = self._read_envelope(child, data, offset, end)
                open_blocks.append(child)

        return root, offset

    def _read_opcode(
        self, data: BytesLike, offset: int, end: int, depth: int
    ) -> Tuple[DecodedNode, int]:
        opcode = data[offset]
        node = DecodedNode(
            tag=self.tags.symbol(opcode), opcode=opcode, depth=depth, offset=offset
        )
        logger.debug("%s%s (0x%02x)", " " * depth, node.tag, opcode)
        offset += 1

        if self.tags.is_parameter(opcode):
            # A status byte here means the value was cut off
            if offset >= end or data[offset] & 0x80:
                raise TruncatedMessage(f"{node.tag} is missing its value byte", offset)
            node.value = data[offset]
            offset += 1

        return node, offset

    def _read_envelope(self, node: DecodedNode, data: BytesLike, offset: int, end: int) -> int:
        if end - offset < ENVELOPE_SIZE:
            raise TruncatedMessage("Input ended inside the envelope", end)
        node.envelope = Envelope(*data[offset : offset + ENVELOPE_SIZE])
        return offset + ENVELOPE_SIZE

    def trace(self, node: DecodedNode) -> Iterator[TraceRecord]:
        """
        Yield diagnostic records in wire order.

        The start marker is reported at its depth, the envelope one level
        deeper, children two levels deeper and the terminator back at the
        start's depth.
        """
        pending: List[Union[DecodedNode, TraceRecord]] = [node]

        while pending:
            item = pending.pop()
            if isinstance(item, TraceRecord):
                yield item
                continue

            yield TraceRecord(item.tag, item.opcode, item.depth)

            if item.value is not None:
                yield TraceRecord("VALUE", item.value, item.depth + 1)

            if item.envelope is not None:
                env = item.envelope
                yield TraceRecord("ID", env.device_id, item.depth + 1)
                yield TraceRecord("SUB1", env.sub1, item.depth + 1)
                yield TraceRecord("SUB2", env.sub2, item.depth + 1)
                yield TraceRecord("CHANNEL", env.channel, item.depth + 1)

            if item.terminator is not None:
                pending.append(
                    TraceRecord(item.terminator.tag, item.terminator.opcode, item.depth)
                )
            pending.extend(reversed(item.children))

    def encode(self, node: DecodedNode) -> bytes:
        """
        Serialize a decoded node back to bytes.

        Declared tags are resolved through the tag table; UNKNOWN nodes
        re-emit their raw opcode.

        Raises:
            UnknownSymbol: If a node carries a tag the table does not declare
        """
        out = bytearray()
        # Nodes still to encode, or terminator bytes still to emit
        pending: List[Union[DecodedNode, int]] = [node]

        while pending:
            item = pending.pop()
            if isinstance(item, int):
                out.append(item)
                continue

            out.append(item.opcode if item.tag == UNKNOWN else self.tags.opcode(item.tag))

            if item.value is not None:
                out.append(item.value)

            if item.is_block:
                if item.envelope is not None:
                    out.extend(item.envelope.to_bytes())
                pending.append(self.tags.opcode("SYSEX_END"))
                pending.extend(reversed(item.children))

        return bytes(out)


def decode_request(data: BytesLike, tags: Optional[TagTable] = None) -> DecodedNode:
    """
    Convenience function to decode a single request.

    Args:
        data: Raw request bytes, F0 through F7

    Returns:
        Root node of the decoded tree
    """
    return SysexDecoder(tags).decode_request(data)


def format_trace(node: DecodedNode, tags: Optional[TagTable] = None) -> str:
    """Render a decoded tree as the plain-text indented trace."""
    decoder = SysexDecoder(tags)
    return "\n".join(record.format() for record in decoder.trace(node))
