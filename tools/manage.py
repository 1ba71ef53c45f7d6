#!/usr/bin/env python3
"""
URAuth Management CLI

Client-side helpers for producing exactly the bytes the registry checks:
- keygen: Generate a keypair and its DID
- did: Convert between account ids and DIDs
- sign-request: Sign an ownership request or direct claim
- sign-challenge: Build and sign the challenge JSON to publish at a URI
- sign-update: Sign a document update as one of its owners
- hash-admin-token: Generate an Argon2 hash for URAUTH_ADMIN_TOKEN_HASH

Usage:
    python -m tools.manage <command> [options]

Examples:
    python -m tools.manage keygen --scheme ecdsa
    python -m tools.manage sign-request --key <hex> --uri https://www.example.com \\
        --owner-did did:infra:ua:... --nonce 1
    python -m tools.manage hash-admin-token --token "s3cret"
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


PROOF_TYPES = {
    "ed25519": "Ed25519Signature2020",
    "ecdsa": "EcdsaSecp256k1RecoverySignature2020",
}


def _emit(data) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def _load_json(value: str):
    """Inline JSON, or @path to read it from a file."""
    if value.startswith("@"):
        return json.loads(Path(value[1:]).read_text(encoding="utf-8"))
    return json.loads(value)


def cmd_keygen(args):
    """Generate a keypair."""
    from urauth.core import Signer, account_to_did
    from urauth.schemas import SignatureScheme

    private_key, account = Signer.generate_keypair(SignatureScheme(args.scheme))
    _emit({
        "scheme": args.scheme,
        "private_key": private_key,
        "account": account,
        "did": account_to_did(account),
    })


def cmd_did(args):
    """Account id <-> DID."""
    from urauth.core import account_to_did, did_to_account

    if args.account:
        _emit({"account": args.account, "did": account_to_did(args.account)})
    else:
        _emit({"account": did_to_account(args.did), "did": args.did})


def cmd_sign_request(args):
    """Sign (uri, owner_did, nonce)."""
    from urauth.core import Signer, request_payload
    from urauth.schemas import SignatureScheme

    scheme = SignatureScheme(args.scheme)
    payload = request_payload(args.uri, args.owner_did, args.nonce)
    signature = Signer.sign(payload, args.key, scheme)
    _emit({
        "uri": args.uri,
        "owner_did": args.owner_did,
        "signer": Signer.account_of(args.key, scheme),
        "signature": signature.model_dump(mode="json"),
    })


def cmd_sign_challenge(args):
    """Print the signed challenge JSON to publish at the URI."""
    from urauth.core import Signer, challenge_payload
    from urauth.schemas import SignatureScheme

    scheme = SignatureScheme(args.scheme)
    timestamp = args.timestamp or datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    payload = challenge_payload(args.uri, args.owner_did, args.challenge, timestamp)
    signature = Signer.sign(payload, args.key, scheme)
    _emit({
        "domain": args.uri,
        "adminDID": args.owner_did,
        "challenge": args.challenge,
        "timestamp": timestamp,
        "proof": {
            "type": PROOF_TYPES[args.scheme],
            "proofValue": signature.value,
        },
    })


def cmd_sign_update(args):
    """Sign the document as it will look after the update."""
    from pydantic import TypeAdapter

    from urauth.core import Signer, apply_update, update_payload
    from urauth.schemas import Proof, SignatureScheme, UpdateDocField, URAuthDoc

    scheme = SignatureScheme(args.scheme)
    doc = URAuthDoc.model_validate(_load_json(args.doc))
    field = TypeAdapter(UpdateDocField).validate_python(_load_json(args.field))

    updated = apply_update(doc, field, args.updated_at)
    payload = update_payload(args.uri, updated, args.owner_did, args.nonce)
    proof = Proof(did=args.owner_did, signature=Signer.sign(payload, args.key, scheme))
    _emit({
        "uri": args.uri,
        "field": field.model_dump(mode="json"),
        "updated_at": args.updated_at,
        "proof": proof.model_dump(mode="json"),
    })


def cmd_hash_admin_token(args):
    """Generate an Argon2 hash of an admin token."""
    from urauth.api.auth import hash_admin_token

    if args.token:
        token = args.token
    else:
        import getpass
        token = getpass.getpass("Enter admin token: ")

    print(hash_admin_token(token))


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="URAuth Management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def signing_parser(name, help_text):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("--key", required=True, help="Private key (hex)")
        p.add_argument("--scheme", choices=sorted(PROOF_TYPES), default="ed25519")
        p.add_argument("--uri", required=True)
        p.add_argument("--owner-did", required=True)
        return p

    p_keygen = subparsers.add_parser("keygen", help="Generate a keypair")
    p_keygen.add_argument("--scheme", choices=sorted(PROOF_TYPES), default="ed25519")

    p_did = subparsers.add_parser("did", help="Convert between account id and DID")
    group = p_did.add_mutually_exclusive_group(required=True)
    group.add_argument("--account", help="Account id (hex)")
    group.add_argument("--did", help="DID to decode")

    p_request = signing_parser("sign-request", "Sign an ownership request or claim")
    p_request.add_argument("--nonce", type=int, required=True, help="Signer's next nonce")

    p_challenge = signing_parser("sign-challenge", "Build the signed challenge JSON")
    p_challenge.add_argument("--challenge", required=True)
    p_challenge.add_argument("--timestamp", help="Defaults to now (UTC)")

    p_update = signing_parser("sign-update", "Sign a document update")
    p_update.add_argument("--doc", required=True, help="Current document JSON, or @file")
    p_update.add_argument("--field", required=True, help="Update field JSON, or @file")
    p_update.add_argument("--updated-at", type=int, required=True, help="Unix milliseconds")
    p_update.add_argument("--nonce", type=int, required=True, help="Owner's next nonce")

    p_hash = subparsers.add_parser("hash-admin-token", help="Hash an admin token")
    p_hash.add_argument("--token", help="Token to hash (prompts if not provided)")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "keygen": cmd_keygen,
        "did": cmd_did,
        "sign-request": cmd_sign_request,
        "sign-challenge": cmd_sign_challenge,
        "sign-update": cmd_sign_update,
        "hash-admin-token": cmd_hash_admin_token,
    }

    return commands[args.command](args) or 0


if __name__ == "__main__":
    sys.exit(main())
