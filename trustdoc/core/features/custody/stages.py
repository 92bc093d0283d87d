# (c) Copyright Datacraft, 2026
"""Ingest progress as explicit stage values.

Each stage carries everything committed so far, so a partially completed
ingest is a concrete value rather than a set of nullable fields.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Hashed:
	content_hash: str


@dataclass(frozen=True)
class Stored(Hashed):
	content_address: str
	content_path: str
	# False when the address was already pinned by an earlier upload
	pinned_here: bool


@dataclass(frozen=True)
class Registered(Stored):
	ledger_id: int
	tx_ref: str
	block_number: int


@dataclass(frozen=True)
class Recorded(Registered):
	document_id: str


IngestProgress = Hashed | Stored | Registered | Recorded


def stored(hashed: Hashed, content_address: str, content_path: str, pinned_here: bool) -> Stored:
	return Stored(
		content_hash=hashed.content_hash,
		content_address=content_address,
		content_path=content_path,
		pinned_here=pinned_here,
	)


def registered(prior: Stored, ledger_id: int, tx_ref: str, block_number: int) -> Registered:
	return Registered(
		content_hash=prior.content_hash,
		content_address=prior.content_address,
		content_path=prior.content_path,
		pinned_here=prior.pinned_here,
		ledger_id=ledger_id,
		tx_ref=tx_ref,
		block_number=block_number,
	)


def recorded(prior: Registered, document_id: str) -> Recorded:
	return Recorded(
		content_hash=prior.content_hash,
		content_address=prior.content_address,
		content_path=prior.content_path,
		pinned_here=prior.pinned_here,
		ledger_id=prior.ledger_id,
		tx_ref=prior.tx_ref,
		block_number=prior.block_number,
		document_id=document_id,
	)
