"""Command-line interface for mchpay utilities.

Example:
    >>> # From terminal:
    >>> # mchpay --version
    >>> # mchpay sign mch_id=1900000109 body=test --api-key <key> --show-canonical
    >>> # mchpay verify reply.xml --appid <appid> --mch-id <mch_id> --api-key <key>
    >>> # mchpay cert convert apiclient_cert.p12 --mch-id <mch_id> --out-cert cert.pem --out-key key.pem
    >>> # mchpay cert inspect --p12 apiclient_cert.p12 --mch-id <mch_id>
"""

from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer

from mchpay import __version__
from mchpay.crypto.canonical import canonical_string
from mchpay.crypto.certs import (
    ClientIdentity,
    load_identity_from_p12_file,
    load_identity_from_pem_files,
)
from mchpay.crypto.reply import verify_reply
from mchpay.crypto.signing import sign
from mchpay.errors import MchError
from mchpay.models.credential import Credential
from mchpay.models.enums import SignType
from mchpay.transport.xml import XMLDecodeError, decode_xml

app = typer.Typer(help="mchpay merchant API CLI.")

cert_app = typer.Typer(help="Client certificate conversion and inspection.")
app.add_typer(cert_app, name="cert")

# Restrict private key file to owner read/write only
PRIVATE_KEY_FILE_MODE = 0o600

API_KEY_OPTION = typer.Option(
    ..., "--api-key", envvar="MCHPAY_API_KEY", help="Merchant signing key."
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


VERSION_OPTION = typer.Option(
    False,
    "--version",
    help="Show mchpay version and exit.",
    callback=_version_callback,
    is_eager=True,
)


@app.callback()
def cli(version: bool = VERSION_OPTION) -> None:
    """mchpay CLI entrypoint."""


def _parse_pairs(pairs: list[str]) -> dict[str, str]:
    payload: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got: {pair!r}")
        payload[key] = value
    return payload


def _fail(exc: MchError) -> NoReturn:
    typer.echo(f"Error [{exc.code}]: {exc.message}", err=True)
    raise typer.Exit(1) from exc


@app.command("sign")
def sign_command(
    pairs: Annotated[list[str], typer.Argument(help="Payload entries as KEY=VALUE.")],
    api_key: str = API_KEY_OPTION,
    sign_type: Annotated[
        SignType, typer.Option("--sign-type", "-t", help="Signature algorithm.")
    ] = SignType.MD5,
    show_canonical: Annotated[
        bool, typer.Option("--show-canonical", help="Also print the canonical string.")
    ] = False,
) -> None:
    """Print the signature of a payload given as KEY=VALUE pairs."""
    payload = _parse_pairs(pairs)
    if show_canonical:
        typer.echo(canonical_string(payload, api_key))
    typer.echo(sign(payload, api_key, sign_type))


@app.command("verify")
def verify_command(
    reply_file: Annotated[Path, typer.Argument(help="Path to the XML reply.")],
    appid: Annotated[str, typer.Option("--appid", envvar="MCHPAY_APPID", help="Application ID.")],
    mch_id: Annotated[str, typer.Option("--mch-id", envvar="MCHPAY_MCH_ID", help="Merchant ID.")],
    api_key: str = API_KEY_OPTION,
) -> None:
    """Verify the signature and identity fields of an XML reply."""
    if not reply_file.exists():
        raise typer.BadParameter(f"File not found: {reply_file}")
    try:
        reply = decode_xml(reply_file.read_bytes())
    except XMLDecodeError as exc:
        raise typer.BadParameter(str(exc)) from exc
    credential = Credential(appid=appid, mch_id=mch_id, api_key=api_key)
    try:
        verify_reply(reply, credential)
    except MchError as exc:
        _fail(exc)
    if "sign" not in reply:
        typer.echo(f"Reply is unsigned; identity fields OK: {reply_file}")
    else:
        typer.echo(f"Signature valid: {reply_file}")


def _load_identity(
    p12: Optional[Path], mch_id: Optional[str], cert: Optional[Path], key: Optional[Path]
) -> ClientIdentity:
    if p12 is not None:
        if not mch_id:
            raise typer.BadParameter("--mch-id is required with --p12")
        return load_identity_from_p12_file(p12, mch_id)
    if cert is not None and key is not None:
        return load_identity_from_pem_files(cert, key)
    raise typer.BadParameter("Give either --p12 with --mch-id, or --cert with --key")


@cert_app.command("convert")
def cert_convert(
    p12_file: Annotated[Path, typer.Argument(help="PKCS#12 (p12/pfx) bundle.")],
    mch_id: Annotated[
        str, typer.Option("--mch-id", envvar="MCHPAY_MCH_ID", help="Merchant ID unlocking the bundle.")
    ],
    out_cert: Annotated[Path, typer.Option("--out-cert", help="Output certificate PEM path.")],
    out_key: Annotated[Path, typer.Option("--out-key", help="Output private key PEM path.")],
) -> None:
    """Convert a PKCS#12 bundle into certificate and key PEM files (key mode 0600)."""
    try:
        identity = load_identity_from_p12_file(p12_file, mch_id)
    except MchError as exc:
        _fail(exc)
    out_cert.parent.mkdir(parents=True, exist_ok=True)
    out_key.parent.mkdir(parents=True, exist_ok=True)
    out_cert.write_bytes(identity.cert_chain_pem)
    out_key.touch(mode=PRIVATE_KEY_FILE_MODE)
    out_key.write_bytes(identity.key_pem)
    try:
        out_key.chmod(PRIVATE_KEY_FILE_MODE)
    except OSError as exc:
        typer.echo(
            f"Warning: could not set file permissions to 0600: {exc}. "
            "Ensure the key file is not readable by others.",
            err=True,
        )
    typer.echo(f"Certificate written to {out_cert}")
    typer.echo(f"Private key written to {out_key}")


@cert_app.command("inspect")
def cert_inspect(
    p12: Annotated[Optional[Path], typer.Option("--p12", help="PKCS#12 bundle.")] = None,
    mch_id: Annotated[
        Optional[str], typer.Option("--mch-id", envvar="MCHPAY_MCH_ID", help="Merchant ID.")
    ] = None,
    cert: Annotated[Optional[Path], typer.Option("--cert", help="Certificate PEM file.")] = None,
    key: Annotated[Optional[Path], typer.Option("--key", help="Private key PEM file.")] = None,
) -> None:
    """Show subject, fingerprint and expiry of a client certificate."""
    try:
        identity = _load_identity(p12, mch_id, cert, key)
    except MchError as exc:
        _fail(exc)
    typer.echo(f"Subject: {identity.subject}")
    typer.echo(f"SHA-256 fingerprint: {identity.fingerprint()}")
    typer.echo(f"Not valid after: {identity.not_valid_after.isoformat()}")
    typer.echo(f"Chain certificates: {len(identity.chain)}")


def main() -> None:
    """Run the mchpay CLI."""
    app()


if __name__ == "__main__":
    main()
