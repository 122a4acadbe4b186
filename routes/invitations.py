from flask import Blueprint, request, jsonify, session, current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import generate_password_hash
from models import db, Member
from services.auth import admin_required
from utils.errors import InvitationStoreError
from utils.helpers import utcnow

admin_bp = Blueprint('invitations', __name__, url_prefix='/admin')
registration_bp = Blueprint('registration', __name__)


def get_services():
    return current_app.extensions['invitations']


def current_admin_id():
    return session.get('member_id')


@admin_bp.route('/invitations', methods=['GET'])
@admin_required
def list_invitations():
    """Open invitations, newest first"""
    return jsonify({'invitations': get_services().manager.list_pending()})


@admin_bp.route('/invitations', methods=['POST'])
@admin_required
def send_invitation():
    """Quick invite for a single address"""
    data = request.get_json(silent=True) or {}
    outcome = get_services().manager.invite(data.get('email', ''), invited_by=current_admin_id())
    return jsonify(outcome.to_dict()), 200 if outcome.success else 400


@admin_bp.route('/invitations/bulk', methods=['POST'])
@admin_required
def send_bulk_invitations():
    """Batch send from a list of addresses or pasted text"""
    data = request.get_json(silent=True) or {}
    bulk = get_services().bulk

    if 'emails' in data:
        if not isinstance(data['emails'], list):
            return jsonify({'message': 'emails must be a list'}), 400
        result = bulk.send_batch(data['emails'], invited_by=current_admin_id())
    elif data.get('text'):
        result = bulk.send_text(data['text'], invited_by=current_admin_id())
    else:
        return jsonify({'message': 'Provide emails or text'}), 400

    return jsonify(result.to_dict())


@admin_bp.route('/invitations/<int:invitation_id>/resend', methods=['POST'])
@admin_required
def resend_invitation(invitation_id):
    outcome = get_services().manager.resend(invitation_id, invited_by=current_admin_id())
    if outcome.success:
        return jsonify(outcome.to_dict())
    return jsonify(outcome.to_dict()), 404 if outcome.error == 'not_found' else 400


@admin_bp.route('/guests', methods=['POST'])
@admin_required
def create_guest():
    """Add a guest runner; the real address (if any) only goes to the invitation"""
    data = request.get_json(silent=True) or {}
    full_name = (data.get('full_name') or '').strip()
    if not full_name:
        return jsonify({'message': 'full_name is required'}), 400

    try:
        member, outcome = get_services().guests.create_guest(
            full_name,
            email=data.get('email'),
            send_invitation=bool(data.get('send_invitation')),
            invited_by=current_admin_id(),
        )
    except InvitationStoreError as e:
        return jsonify({'message': str(e)}), 500

    return jsonify({
        'member': member.to_dict(),
        'invitation': outcome.to_dict() if outcome else None,
    }), 201


@registration_bp.route('/register', methods=['GET'])
def registration_details():
    """Resolve the invited address from the token; the link never carries the email"""
    validation = get_services().manager.validate_token(request.args.get('token', ''))
    return jsonify(validation.to_dict()), 200 if validation.valid else 400


@registration_bp.route('/register', methods=['POST'])
def register():
    """Create the member account for an invitation, then close the invitation"""
    data = request.get_json(silent=True) or {}
    token = data.get('token', '')
    full_name = (data.get('full_name') or '').strip()
    password = data.get('password') or ''

    if not token or not full_name or not password:
        return jsonify({'message': 'token, full_name and password are required'}), 400

    manager = get_services().manager
    validation = manager.validate_token(token)
    if not validation.valid:
        return jsonify(validation.to_dict()), 400

    if Member.query.filter_by(email=validation.email).first():
        return jsonify({'message': 'Account already exists for this email.'}), 409

    member = Member(
        email=validation.email,
        full_name=full_name,
        membership_status='active',
        password_hash=generate_password_hash(password),
        invited_at=utcnow(),
    )
    db.session.add(member)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        # Invitation stays pending; the same link can be used again
        return jsonify({'message': 'Registration failed, please try again.'}), 500

    manager.mark_registered(token)
    return jsonify({'message': 'Account created successfully! You can now login.',
                    'member': member.to_dict()}), 201
