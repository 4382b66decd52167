"""
Account access primitives.

``AccountInfo`` is the host-supplied view of one account for the duration
of an instruction. Storage borrows follow a shared-XOR-exclusive rule:
any number of read borrows, or a single write borrow, never both. Storage
cannot be resized while any borrow is open.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from .errors import BuiltinError, ProgramError
from .pubkey import SYSTEM_PROGRAM_ID, Pubkey

_EXCLUSIVE = -1


@dataclass(eq=False)
class AccountInfo:
    """
    One account passed to an instruction.

    Attributes:
        key: Account address
        owner: Program that owns the account
        lamports: Native balance
        data: Raw account storage
        is_signer: Whether the transaction was signed by this key
        is_writable: Whether the account may be modified
        executable: Whether the account holds a program
    """

    key: Pubkey
    owner: Pubkey = SYSTEM_PROGRAM_ID
    lamports: int = 0
    data: bytearray = field(default_factory=bytearray)
    is_signer: bool = False
    is_writable: bool = False
    executable: bool = False
    _borrows: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.data, bytearray):
            self.data = bytearray(self.data)

    @property
    def data_len(self) -> int:
        return len(self.data)

    @property
    def is_borrowed(self) -> bool:
        return self._borrows != 0

    def is_owned_by(self, program_id: Pubkey) -> bool:
        return self.owner == program_id

    @contextmanager
    def borrow_data(self) -> Iterator[memoryview]:
        """Shared, read-only borrow of the account storage."""
        if self._borrows == _EXCLUSIVE:
            raise ProgramError(BuiltinError.ACCOUNT_BORROW_FAILED, f"{self.key} is mutably borrowed")
        self._borrows += 1
        base = memoryview(self.data)
        view = base.toreadonly()
        try:
            yield view
        finally:
            view.release()
            base.release()
            self._borrows -= 1

    @contextmanager
    def borrow_mut_data(self) -> Iterator[memoryview]:
        """Exclusive, writable borrow of the account storage."""
        if self._borrows != 0:
            raise ProgramError(BuiltinError.ACCOUNT_BORROW_FAILED, f"{self.key} is already borrowed")
        self._borrows = _EXCLUSIVE
        view = memoryview(self.data)
        try:
            yield view
        finally:
            view.release()
            self._borrows = 0

    def resize(self, new_len: int) -> None:
        if new_len < 0:
            raise ProgramError(BuiltinError.INVALID_ARGUMENT, "negative account size")
        if self._borrows != 0:
            raise ProgramError(
                BuiltinError.ACCOUNT_BORROW_FAILED, f"cannot resize {self.key} while borrowed"
            )
        if new_len > len(self.data):
            self.data.extend(bytes(new_len - len(self.data)))
        else:
            del self.data[new_len:]

    def assign(self, owner: Pubkey) -> None:
        self.owner = owner
