import asyncio
import sys
from pathlib import Path
from typing import NamedTuple

from rich.text import Text

from etherna_devstack.core.utils.process_command_output import process_output_till_done
from etherna_devstack.env_description.envs import CERTIFICATE_PASSWORD
from etherna_devstack.env_description.envs import CERTIFICATE_PFX_NAME
from etherna_devstack.errors import CertificateError
from etherna_devstack.output.console import CONSOLE
from etherna_devstack.output.styles import Style

CERTIFICATE_CERT_NAME = 'etherna.crt'
CERTIFICATE_KEY_NAME = 'etherna.key'
CERTIFICATE_DOMAIN = 'etherna.localhost'
CERTIFICATE_ALT_NAMES = ('localhost', 'host.docker.internal')
CERTIFICATE_DAYS = 30


class CertificateFiles(NamedTuple):
    key: Path
    cert: Path
    pfx: Path


class CertificateBundle(NamedTuple):
    key: bytes
    cert: bytes
    pfx: bytes


def certificate_paths(directory: Path) -> CertificateFiles:
    return CertificateFiles(
        key=directory / CERTIFICATE_KEY_NAME,
        cert=directory / CERTIFICATE_CERT_NAME,
        pfx=directory / CERTIFICATE_PFX_NAME,
    )


async def _openssl(*args: str) -> None:
    try:
        process = await asyncio.create_subprocess_exec(
            'openssl', *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise CertificateError(f"Can't generate certificate, openssl is not available: {e}") from e

    _, stderr = await process_output_till_done(process)
    if process.returncode != 0:
        raise CertificateError(f'openssl {args[0]} failed:\n{stderr}')


async def generate_certificate(directory: Path) -> None:
    paths = certificate_paths(directory)
    alt_names = ','.join(f'DNS:{name}' for name in (CERTIFICATE_DOMAIN, *CERTIFICATE_ALT_NAMES))
    await _openssl(
        'req', '-x509', '-newkey', 'rsa:2048', '-nodes',
        '-keyout', str(paths.key), '-out', str(paths.cert),
        '-days', str(CERTIFICATE_DAYS),
        '-subj', f'/CN={CERTIFICATE_DOMAIN}',
        '-addext', f'subjectAltName={alt_names}',
    )
    await _openssl(
        'pkcs12', '-export',
        '-inkey', str(paths.key), '-in', str(paths.cert), '-out', str(paths.pfx),
        '-passout', f'pass:{CERTIFICATE_PASSWORD}',
    )


def host_trust_command(cert: Path, platform: str = sys.platform) -> list[str] | None:
    match platform:
        case 'darwin':
            keychain = Path.home() / 'Library' / 'Keychains' / 'login.keychain-db'
            return ['security', 'add-trusted-cert', '-p', 'ssl', '-p', 'basic', '-k', str(keychain), str(cert)]
        case 'linux':
            return ['update-ca-certificates', str(cert)]
        case 'win32':
            return ['certutil', '-addstore', '-f', 'ROOT', str(cert)]
    return None


async def trust_certificate(cert: Path, platform: str = sys.platform) -> bool:
    """Add ``cert`` to the host trust store. Failures are reported, not raised."""
    command = host_trust_command(cert, platform)
    if command is None:
        CONSOLE.print(Text(f'  Unsupported platform for trusting certificate: {platform}', style=Style.bad))
        return False

    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        CONSOLE.print(Text(f'  Error trusting ssl certificate: {e}', style=Style.bad))
        return False

    _, stderr = await process_output_till_done(process)
    if process.returncode != 0:
        CONSOLE.print(Text(f'  Error trusting ssl certificate ({command[0]} exited with code '
                           f'{process.returncode}):\n{stderr}', style=Style.bad))
        return False
    return True


async def ensure_certificate(directory: Path, platform: str = sys.platform) -> CertificateBundle:
    """
    Key, certificate and pfx bundle from ``directory``.

    Generated on first use, the new certificate is then trusted on the host.
    """
    paths = certificate_paths(directory)
    if not all(path.exists() for path in paths):
        directory.mkdir(parents=True, exist_ok=True)
        await generate_certificate(directory)
        await trust_certificate(paths.cert, platform)

    return CertificateBundle(*(path.read_bytes() for path in paths))
