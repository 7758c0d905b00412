from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path
from urllib.parse import quote

import qrcode

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from dinebot.settings import settings  # noqa: E402


def click_to_chat_url(phone: str, text: str = "hi") -> str:
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        raise SystemExit("No WhatsApp number: set BUSINESS_PHONE or pass --phone")
    return f"https://wa.me/{digits}?text={quote(text)}"


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a WhatsApp click-to-chat QR code")
    parser.add_argument("--phone", default=settings.business_phone, help="business number with country code")
    parser.add_argument("--text", default="hi", help="prefilled first message")
    parser.add_argument("--out", default=settings.qr_out_dir, help="output directory")
    parser.add_argument("--name", default="", help="file name stem (defaults to the number)")
    args = parser.parse_args()

    url = click_to_chat_url(args.phone, args.text)

    out_dir = Path(args.out)
    if not out_dir.is_absolute():
        out_dir = PROJECT_ROOT / out_dir
    out_dir.mkdir(parents=True, exist_ok=True)

    stem = args.name or re.sub(r"\D", "", args.phone)
    out_path = out_dir / f"whatsapp__{stem}.png"
    qrcode.make(url).save(out_path)

    print(f"OK  {url}  ->  {out_path}")


if __name__ == "__main__":
    main()
