# voting/database/models.py

from voting import db

# Schema for users, candidates and votes. AUTOINCREMENT is requested on SQLite
# so ids are never reused and the candidates counter lives in sqlite_sequence.

class User(db.Model):
    __tablename__ = 'users'
    __table_args__ = {'sqlite_autoincrement': True}
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.Text, unique=True, nullable=False)
    password_hash = db.Column(db.Text, nullable=False)  # opaque, hashed by the caller

    votes = db.relationship('Vote', backref='voter', lazy=True)

    def __repr__(self):
        return f'<User {self.id} {self.username}>'

class Candidate(db.Model):
    __tablename__ = 'candidates'
    __table_args__ = {'sqlite_autoincrement': True}
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.Text, nullable=False)

    votes = db.relationship('Vote', backref='candidate', lazy=True)

    def __repr__(self):
        return f'<Candidate {self.id} {self.name}>'

class Vote(db.Model):
    __tablename__ = 'votes'
    __table_args__ = {'sqlite_autoincrement': True}
    id = db.Column(db.Integer, primary_key=True)
    # No unique constraint on user_id: one vote per user is checked before insert
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    candidate_id = db.Column(db.Integer, db.ForeignKey('candidates.id'))
    timestamp = db.Column(db.Text)  # local time, "%Y-%m-%d %H:%M:%S"

    def __repr__(self):
        return f'<Vote {self.id} by User {self.user_id}>'
