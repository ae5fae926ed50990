import getpass
from hospital_billing.config import settings
from hospital_billing.database import Database
from hospital_billing.exceptions import ConflictError
from hospital_billing.services.storage import DatabaseStorage


def add_user(database: Database):
    print("🏥 Add Billing Login")
    print("====================")

    username = input("Username: ").strip()
    if not username:
        print("Username is required.")
        return

    name = input("Full name: ").strip() or username
    role = input("Role [user]: ").strip() or "user"
    password = getpass.getpass("Password: ")
    if not password:
        print("Password is required.")
        return

    database.init_db()
    db = database.session()
    storage = DatabaseStorage(db)

    try:
        user = storage.create_user({
            "username": username,
            "password": password,
            "name": name,
            "role": role,
        })
        print(f"\n✅ Created {user.role} login '{user.username}' ({user.name})")
    except ConflictError as e:
        print(f"\n❌ {e.message}")
    finally:
        db.close()


if __name__ == "__main__":
    add_user(Database(settings.DATABASE_URL))
