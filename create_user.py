from extensions import db
from models import ROLES, User


def create_user(username, password, role):
    """Create a user in the current app context; returns None if the name is taken."""
    if role not in ROLES:
        raise ValueError(f"Role must be one of: {', '.join(ROLES)}")

    existing_user = User.query.filter_by(username=username).first()
    if existing_user:
        print(f"User '{username}' already exists with role '{existing_user.role}'.")
        return None

    user = User(username=username, role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    print(f"Created user: {username} (role: {role})")
    return user

if __name__ == '__main__':
    import argparse

    from app import create_app

    parser = argparse.ArgumentParser(description='Create a maintenance planner user.')
    parser.add_argument('username', help='Username')
    parser.add_argument('password', help='Password')
    parser.add_argument('role', choices=list(ROLES), help='User role')

    args = parser.parse_args()
    with create_app().app_context():
        create_user(args.username, args.password, args.role)
