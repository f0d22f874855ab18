from pathlib import Path

from .crypto import CertRole, PKIStore
from .store import PKILayout


def _rel(layout: PKILayout, path: Path) -> str:
    try:
        return str(path.relative_to(layout.root))
    except ValueError:
        return str(path)


def format_summary(store: PKIStore, layout: PKILayout) -> str:
    lines = [
        "",
        "========================================",
        "Certificate generation completed!",
        "========================================",
        "",
        f"Certificate directory: {layout.root}",
        "",
        "Files generated:",
    ]
    if store.ca:
        lines.append(f"  CA Certificate:       {_rel(layout, store.ca.cert_path)}  ({store.ca.common_name})")
        lines.append(f"  CA Private Key:       {_rel(layout, store.ca.key_path)}")
    for server in store.leaves_for_role(CertRole.SERVER):
        lines.append(f"  Server Certificate:   {_rel(layout, server.cert_path)}")
        lines.append(f"  Server Private Key:   {_rel(layout, server.key_path)}")
    if store.dh:
        lines.append(f"  DH Parameters:        {_rel(layout, store.dh.path)}")
    if store.crl:
        lines.append(f"  CRL:                  {_rel(layout, store.crl.path)}")
    if store.tunnel_key:
        lines.append(f"  TLS-Crypt Key:        {_rel(layout, store.tunnel_key.path)}")

    clients = store.leaves_for_role(CertRole.CLIENT)
    if clients:
        lines.append("")
        lines.append("Client certificates:")
        for client in clients:
            lines.append(f"  {client.name}: {_rel(layout, client.cert_path)}, {_rel(layout, client.key_path)}")

    ca_unencrypted = store.ca is not None and not store.ca.encrypted_key
    if ca_unencrypted or any(not leaf.encrypted_key for leaf in store.leaves):
        lines.append("")
        lines.append("Note: private keys were written without a passphrase.")

    lines.extend([
        "",
        "To revoke a certificate, run:",
        f"  vpnca --store-root {layout.root} revoke <client_name>",
        "",
    ])
    return "\n".join(lines)
