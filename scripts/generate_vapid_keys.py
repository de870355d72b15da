"""
Generate VAPID key pair for Web Push notifications.

Run once:
    python scripts/generate_vapid_keys.py

Copy the output into your .env file. The public key is also what the browser
passes as `applicationServerKey` when subscribing.
"""
import base64
from py_vapid import Vapid


def application_server_key(vapid: Vapid) -> str:
    """URL-safe base64 of the uncompressed EC public point."""
    pub_nums = vapid.public_key.public_numbers()
    raw = b"\x04" + pub_nums.x.to_bytes(32, "big") + pub_nums.y.to_bytes(32, "big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def main():
    v = Vapid()
    v.generate_keys()

    priv_pem = v.private_pem()
    if isinstance(priv_pem, bytes):
        priv_pem = priv_pem.decode()

    print("Add these to your .env:\n")
    print(f"VAPID_PUBLIC_KEY={application_server_key(v)}")
    # Single line, escaped newlines are restored when the key is loaded
    print(f"VAPID_PRIVATE_KEY={priv_pem.strip().replace(chr(10), chr(92) + 'n')}")


if __name__ == "__main__":
    main()
