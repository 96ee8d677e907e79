"""Program wrapper — embeds a generated body in a complete Jasmin class."""

from __future__ import annotations

TEMPLATE: list[str] = [
    ".class public (~CLASSNAME~)\n",
    ".super java/lang/Object\n",
    "\n",
    ".field private static stdin Ljava/io/BufferedReader;\n",
    "\n",
    ".method static <clinit>()V\n",
    ".limit stack 5\n",
    "    new java/io/BufferedReader\n",
    "    dup\n",
    "    new java/io/InputStreamReader\n",
    "    dup\n",
    "    getstatic java/lang/System/in Ljava/io/InputStream;\n",
    "    invokespecial java/io/InputStreamReader/<init>(Ljava/io/InputStream;)V\n",
    "    invokespecial java/io/BufferedReader/<init>(Ljava/io/Reader;)V\n",
    "    putstatic (~CLASSNAME~)/stdin Ljava/io/BufferedReader;\n",
    "    return\n",
    ".end method\n",
    "\n",
    ".method public <init>()V\n",
    ".limit stack 10\n",
    "    aload_0\n",
    "    invokespecial java/lang/Object/<init>()V\n",
    "    return\n",
    ".end method\n",
    "\n",
    ".method public static main([Ljava/lang/String;)V\n",
    ".limit stack 10\n",
    "(~CODE~)",
    "    return\n",
    ".limit locals (~LOCALS~)\n",
    ".end method\n",
]


def wrap(class_name: str, body: str, max_locals: int) -> str:
    """Render the class with body as main() and the final locals limit."""
    if body != "" and not body.endswith("\n"):
        body += "\n"
    values = {
        "CLASSNAME": class_name,
        "CODE": body,
        "LOCALS": str(max_locals),
    }
    out: list[str] = []
    for line in TEMPLATE:
        for key, value in values.items():
            line = line.replace("(~" + key + "~)", value)
        out.append(line)
    return "".join(out)
