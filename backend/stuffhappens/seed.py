"""Seed data for ``flask db-reset``: demo accounts and the card catalog."""
from stuffhappens import db
from stuffhappens.models import Card, User

USERS = [
    ('testuser1', 'testuser1@example.com'),
    ('testuser2', 'testuser2@example.com'),
    ('testuser3', 'testuser3@example.com'),
]

UNIVERSITY_LIFE = [
    ('You forget your pen before a quiz', 3),
    ('The vending machine eats your coins', 5),
    ('Your coffee spills on your notes', 8),
    ('The lecture hall has no free seats', 10),
    ('Wi-Fi drops during an online lecture', 12),
    ('Your student card stops working at the canteen', 14),
    ('You miss the last bus home after the library closes', 17),
    ('A group mate never answers messages', 20),
    ('Your laptop battery dies mid-lecture', 23),
    ('The printer jams before the submission deadline', 25),
    ('Your bike is stolen outside the faculty', 28),
    ('You sleep through a morning lab', 31),
    ('Your flatmate eats your exam-week groceries', 34),
    ('The professor changes the exam date', 36),
    ('Your thesis file will not open', 39),
    ('You fail a quiz you studied for', 42),
    ('Your rent increases mid-semester', 44),
    ('You are assigned the 8 a.m. exam slot', 47),
    ('You lose your USB stick with the project', 49),
    ('The course you need is full', 52),
    ('Your scholarship payment is delayed', 55),
    ('You get food poisoning from the canteen', 58),
    ('Your group presentation file is corrupted', 60),
    ('You catch the flu during exam week', 63),
    ('Your internship offer is withdrawn', 66),
    ('You are accused of plagiarism by mistake', 69),
    ('Your laptop is stolen with unsaved work', 71),
    ('You fail an exam by one point', 74),
    ('Your thesis supervisor leaves the university', 77),
    ('You miss the final exam because of a train strike', 80),
    ('Your apartment floods during finals', 83),
    ('You lose your scholarship', 86),
    ('You must repeat a whole year', 90),
    ('Your thesis is rejected the week before graduation', 93),
    ('Your degree is revoked over a paperwork error', 97),
]


def seed_users(password='password'):
    created = 0
    for username, email in USERS:
        if User.query.filter_by(username=username).first():
            continue
        user = User(username=username, email=email)
        user.set_password(password)
        db.session.add(user)
        created += 1
    return created


def seed_cards(theme='university_life'):
    created = 0
    for idx, (name, index) in enumerate(UNIVERSITY_LIFE, start=1):
        db.session.add(Card(
            name=name,
            image_url=f'/images/{theme}/{idx:02d}.png',
            bad_luck_index=index,
            theme=theme,
        ))
        created += 1
    return created
