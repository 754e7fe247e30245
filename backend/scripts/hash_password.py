import getpass
import sys
import bcrypt

password = sys.argv[1] if len(sys.argv) > 1 else getpass.getpass("Admin password: ")
if not password:
    sys.exit("Password must not be empty")

print(bcrypt.hashpw(password.encode("utf-8")[:72], bcrypt.gensalt()).decode("utf-8"))
