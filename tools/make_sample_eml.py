import random
import uuid
from datetime import datetime, timezone
from pathlib import Path

NAMES = ["alice", "bob", "carol", "dave", "erin", "frank"]
SUBJECTS = ["Quarterly numbers", "Lunch on Friday?", "Re: build failure", "Invoice 2291"]

def generate_message(output_dir: str, domain: str = "gmail.com", with_to: bool = True, body_lines: int = 20) -> Path:
    sender = random.choice(NAMES)
    rcpt = random.choice([n for n in NAMES if n != sender])
    msg_id = str(uuid.uuid4())
    date = datetime.now(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S +0000")

    headers = [
        f"From: {sender.title()} <{sender}@{domain}>",
    ]
    if with_to:
        headers.append(f"To: {rcpt.title()} <{rcpt}@example.org>")
    headers += [
        f"Subject: {random.choice(SUBJECTS)}",
        f"Date: {date}",
        f"Message-ID: <{msg_id}@mail.{domain}>",
        "MIME-Version: 1.0",
        "Content-Type: text/plain; charset=utf-8",
    ]

    body = [f"line {i}: " + " ".join(random.choice(NAMES) for _ in range(8)) for i in range(body_lines)]

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / f"message-{msg_id[:8]}.eml"
    # Canonical CRLF line endings, as delivered
    path.write_bytes(("\r\n".join(headers) + "\r\n\r\n" + "\r\n".join(body) + "\r\n").encode("utf-8"))

    print(f"GENERATED: {path}")
    return path

if __name__ == "__main__":
    import sys

    # Usage:
    #   python tools/make_sample_eml.py OUT_DIR [--count N] [--domain D] [--no-to]

    args = [a for a in sys.argv[1:] if a]

    def pop_flag(arg_list: list[str], flag: str) -> tuple[bool, list[str]]:
        """Remove a boolean flag from an argv-style list."""
        if flag in arg_list:
            return True, [a for a in arg_list if a != flag]
        return False, arg_list

    def pop_value(arg_list: list[str], flag: str, default: str) -> tuple[str, list[str]]:
        if flag not in arg_list:
            return default, arg_list
        i = arg_list.index(flag)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{flag} requires a value")
        return arg_list[i + 1], arg_list[:i] + arg_list[i + 2:]

    no_to, args = pop_flag(args, "--no-to")
    count, args = pop_value(args, "--count", "1")
    domain, args = pop_value(args, "--domain", "gmail.com")

    out = args[0] if len(args) > 0 else "sample_messages"
    for _ in range(int(count)):
        generate_message(out, domain=domain, with_to=not no_to)
